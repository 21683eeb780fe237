"""Backend-neutral storage interface.

Services talk to a Storage rather than to a database driver. Writes are
staged until commit(), so a service can group several writes into one unit
of work and roll all of them back together.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any
import uuid

from autoheal.models import Approval, Failure, PullRequest, Run, Selector, Suggestion, User

RecordId = str | uuid.UUID


@dataclass
class FailureFilter:
    repo: str | None = None
    status: str | None = None
    run_id: str | None = None
    since: datetime | None = None
    limit: int = 50
    offset: int = 0


@dataclass
class RunFilter:
    repo: str | None = None
    status: str | None = None
    limit: int = 50
    offset: int = 0


class Storage(ABC):
    """Create / read / update-by-id / query-by-filter for every entity."""

    # Unit of work

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...

    # Users

    @abstractmethod
    async def get_user(self, user_id: RecordId) -> User | None: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> User | None: ...

    @abstractmethod
    async def create_user(self, username: str, password_hash: str) -> User:
        """Raises ConflictError if the username is taken."""

    # Runs

    @abstractmethod
    async def create_run(self, data: dict[str, Any]) -> Run: ...

    @abstractmethod
    async def get_run(self, run_id: RecordId) -> Run | None: ...

    @abstractmethod
    async def list_runs(self, filters: RunFilter) -> list[Run]: ...

    @abstractmethod
    async def update_run(self, run_id: RecordId, expected_status: str, values: dict[str, Any]) -> Run | None:
        """Apply values only while the run is in expected_status; None if it was not."""

    # Failures

    @abstractmethod
    async def create_failure(self, data: dict[str, Any]) -> Failure: ...

    @abstractmethod
    async def get_failure(self, failure_id: RecordId) -> Failure | None: ...

    @abstractmethod
    async def list_failures(self, filters: FailureFilter) -> list[Failure]: ...

    @abstractmethod
    async def transition_failure(self, failure_id: RecordId, expected_status: str, new_status: str) -> bool:
        """Compare-and-set the failure status. False if the current status differs."""

    @abstractmethod
    async def count_suggestions(self, failure_ids: list[uuid.UUID]) -> dict[uuid.UUID, int]: ...

    # Suggestions

    @abstractmethod
    async def create_suggestion(
        self,
        failure_id: RecordId,
        candidates: list[dict[str, Any]],
        top_choice: str | None,
        explanation_of_failure: str | None = None,
    ) -> Suggestion:
        """Raises NotFoundError if the failure does not exist.

        created_at is strictly increasing per failure, so "latest" is never a tie.
        """

    @abstractmethod
    async def get_suggestion(self, suggestion_id: RecordId) -> Suggestion | None: ...

    @abstractmethod
    async def list_suggestions(self, failure_id: RecordId) -> list[Suggestion]:
        """Newest first."""

    @abstractmethod
    async def latest_suggestion(self, failure_id: RecordId) -> Suggestion | None: ...

    # Approvals

    @abstractmethod
    async def create_approval(
        self, suggestion_id: RecordId, approved_by: str, decision: str, notes: str | None
    ) -> Approval:
        """Raises NotFoundError if the suggestion does not exist."""

    @abstractmethod
    async def list_approvals(self, suggestion_id: RecordId) -> list[Approval]:
        """Newest first."""

    @abstractmethod
    async def list_recent_approvals(self, decision: str | None, limit: int) -> list[Approval]: ...

    # Selector catalog

    @abstractmethod
    async def get_selector(self, page: str, name: str) -> Selector | None: ...

    @abstractmethod
    async def list_selectors(self, page: str | None = None) -> list[Selector]: ...

    @abstractmethod
    async def upsert_selector(self, page: str, name: str, current: str, history_entry: dict[str, Any]) -> Selector: ...

    # Pull requests

    @abstractmethod
    async def get_pull_request(self, suggestion_id: RecordId) -> PullRequest | None: ...

    @abstractmethod
    async def save_pull_request(self, suggestion_id: RecordId, values: dict[str, Any]) -> PullRequest:
        """Create the pull request record for a suggestion, or update the existing one."""

    @abstractmethod
    async def list_pull_requests(self, status: str | None, limit: int) -> list[PullRequest]: ...

    # Dashboard aggregates

    @abstractmethod
    async def failure_status_counts(self) -> dict[str, int]: ...

    @abstractmethod
    async def run_status_counts(self) -> dict[str, int]: ...

    @abstractmethod
    async def approval_decision_counts(self) -> dict[str, int]: ...


def parse_id(value: RecordId) -> uuid.UUID | None:
    """Ids are opaque to callers; anything that is not a UUID simply matches nothing."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None
