"""Service for capturing failures and recording suggestions against them."""

import logging
from datetime import timezone

from autoheal.exceptions import NotFoundError, StateConflictError
from autoheal.models import Failure, Suggestion
from autoheal.schemas.failure import FailureCreate
from autoheal.schemas.suggestion import SuggestionCreate
from autoheal.services.workflow import NEW, SUGGESTED, is_terminal
from autoheal.storage import FailureFilter, Storage

logger = logging.getLogger(__name__)


class FailureService:
    """Failure ingestion and the new -> suggested transition."""

    def __init__(self, storage: Storage):
        self.storage = storage

    async def ingest(self, payload: FailureCreate) -> Failure:
        """Persist a reported failure with status new. Nothing else happens here;
        suggestion generation runs elsewhere and reports back via record_suggestion."""
        failure = await self.storage.create_failure(payload.model_dump())
        await self.storage.commit()

        logger.info(
            "Captured failure %s: %s / %s (selector %s, run %s)",
            failure.id, failure.suite, failure.test, failure.current_selector, failure.run_id,
        )
        return failure

    async def get(self, failure_id: str) -> Failure:
        failure = await self.storage.get_failure(failure_id)
        if not failure:
            raise NotFoundError("Failure not found")
        return failure

    async def list_failures(self, filters: FailureFilter) -> list[tuple[Failure, int]]:
        """Failures newest first, each paired with its suggestion count."""
        if filters.since and filters.since.tzinfo:
            filters.since = filters.since.astimezone(timezone.utc).replace(tzinfo=None)

        failures = await self.storage.list_failures(filters)
        counts = await self.storage.count_suggestions([failure.id for failure in failures])
        return [(failure, counts.get(failure.id, 0)) for failure in failures]

    async def record_suggestion(self, data: SuggestionCreate) -> Suggestion:
        """Store a ranked candidate set for a failure.

        Candidates are kept in the order given. The first suggestion moves the
        failure from new to suggested; later ones are new records that leave
        the status alone. Decided failures accept no more suggestions.
        """
        failure = await self.get(data.failure_id)
        if is_terminal(failure.status):
            raise StateConflictError(f"Failure is already {failure.status}")

        try:
            suggestion = await self.storage.create_suggestion(
                failure.id, data.stored_candidates(), data.top_choice, data.explanation_of_failure
            )
            if failure.status == NEW:
                moved = await self.storage.transition_failure(failure.id, NEW, SUGGESTED)
                if not moved:
                    raise StateConflictError("Failure status changed while recording suggestion")
            await self.storage.commit()
        except Exception:
            await self.storage.rollback()
            raise

        logger.info(
            "Recorded suggestion %s for failure %s (%d candidates, top choice %s)",
            suggestion.id, failure.id, len(suggestion.candidates), suggestion.top_choice,
        )
        return suggestion

    async def suggestions(self, failure_id: str) -> list[Suggestion]:
        failure = await self.get(failure_id)
        return await self.storage.list_suggestions(failure.id)

    async def latest_suggestion(self, failure_id: str) -> Suggestion:
        failure = await self.get(failure_id)
        suggestion = await self.storage.latest_suggestion(failure.id)
        if not suggestion:
            raise NotFoundError("No suggestions recorded for this failure")
        return suggestion
