"""Reviewer decisions on suggestions: the suggested -> approved/rejected step."""

import logging
from datetime import datetime

from autoheal.exceptions import NotFoundError, StateConflictError
from autoheal.models import Approval, User
from autoheal.schemas.approval import ApprovalCreate
from autoheal.services.pull_request_service import PullRequestService
from autoheal.services.selector_service import selector_key
from autoheal.services.workflow import DECISION_STATUS, SUGGESTED, can_transition
from autoheal.storage import Storage

logger = logging.getLogger(__name__)


class ApprovalService:
    def __init__(self, storage: Storage, pull_requests: PullRequestService | None = None):
        self.storage = storage
        self.pull_requests = pull_requests

    async def decide(self, data: ApprovalCreate, reviewer: User) -> Approval:
        """Record an approval or rejection and move the failure to its final status.

        The approval row, the failure status change and (on approve, when a
        catalog key is given) the selector catalog update commit together.
        """
        suggestion = await self.storage.get_suggestion(data.suggestion_id)
        if not suggestion:
            raise NotFoundError("Suggestion not found")

        failure = await self.storage.get_failure(suggestion.failure_id)
        if not failure:
            raise NotFoundError("Failure not found")

        target = DECISION_STATUS[data.decision]
        if not can_transition(failure.status, target):
            raise StateConflictError(
                f"Failure is {failure.status}; only suggested failures can be {target}"
            )

        latest = await self.storage.latest_suggestion(failure.id)
        if latest is None or latest.id != suggestion.id:
            raise StateConflictError("A newer suggestion exists for this failure")

        approved_by = data.approved_by or reviewer.username

        try:
            approval = await self.storage.create_approval(
                suggestion.id, approved_by, data.decision, data.notes
            )
            # Compare-and-set: a concurrent decision on the same failure loses here
            if not await self.storage.transition_failure(failure.id, SUGGESTED, target):
                raise StateConflictError("Failure was decided by another reviewer")

            if data.decision == "approve" and data.selector_page is not None:
                await self.storage.upsert_selector(
                    data.selector_page,
                    data.selector_name,
                    suggestion.chosen_selector,
                    {
                        "selector": suggestion.chosen_selector,
                        "commit": failure.commit,
                        "approvedAt": datetime.utcnow().isoformat(),
                        "approvedBy": approved_by,
                    },
                )
            await self.storage.commit()
        except Exception:
            await self.storage.rollback()
            raise

        logger.info(
            "Failure %s %s by %s (suggestion %s)",
            failure.id, target, approved_by, suggestion.id,
        )

        # Opening the PR never undoes the decision; failures are recorded for retry
        if data.decision == "approve" and self.pull_requests is not None:
            key = selector_key(data.selector_page, data.selector_name) if data.selector_page else None
            await self.pull_requests.open_for_approval(approval, suggestion, failure, key)

        return approval

    async def for_suggestion(self, suggestion_id: str) -> list[Approval]:
        suggestion = await self.storage.get_suggestion(suggestion_id)
        if not suggestion:
            raise NotFoundError("Suggestion not found")
        return await self.storage.list_approvals(suggestion.id)
