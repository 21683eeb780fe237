"""SQLAlchemy storage adapter (PostgreSQL in production, SQLite in tests)."""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any

from fastapi import Depends
from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from autoheal.db.database import get_db
from autoheal.exceptions import ConflictError, NotFoundError
from autoheal.models import Approval, Failure, PullRequest, Run, Selector, Suggestion, User
from autoheal.storage.base import FailureFilter, RecordId, RunFilter, Storage, parse_id

logger = logging.getLogger(__name__)


class SQLStorage(Storage):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()

    async def _get(self, model, record_id: RecordId):
        parsed = parse_id(record_id)
        if parsed is None:
            return None
        return await self.db.get(model, parsed)

    async def _add(self, obj):
        self.db.add(obj)
        await self.db.flush()
        return obj

    async def _counts(self, column) -> dict[str, int]:
        result = await self.db.execute(select(column, func.count()).group_by(column))
        return {key: count for key, count in result.all()}

    # Users

    async def get_user(self, user_id: RecordId) -> User | None:
        return await self._get(User, user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def create_user(self, username: str, password_hash: str) -> User:
        if await self.get_user_by_username(username):
            raise ConflictError("Username already taken")
        try:
            return await self._add(User(username=username, password_hash=password_hash))
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError("Username already taken", original_error=e) from e

    # Runs

    async def create_run(self, data: dict[str, Any]) -> Run:
        return await self._add(Run(**data))

    async def get_run(self, run_id: RecordId) -> Run | None:
        return await self._get(Run, run_id)

    async def list_runs(self, filters: RunFilter) -> list[Run]:
        query = select(Run).order_by(Run.started_at.desc())
        if filters.repo:
            query = query.where(Run.repo == filters.repo)
        if filters.status:
            query = query.where(Run.status == filters.status)
        query = query.limit(filters.limit).offset(filters.offset)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update_run(self, run_id: RecordId, expected_status: str, values: dict[str, Any]) -> Run | None:
        parsed = parse_id(run_id)
        if parsed is None:
            return None
        result = await self.db.execute(
            update(Run)
            .where(Run.id == parsed, Run.status == expected_status)
            .values(**values)
        )
        if result.rowcount == 0:
            return None
        return await self.db.get(Run, parsed, populate_existing=True)

    # Failures

    async def create_failure(self, data: dict[str, Any]) -> Failure:
        return await self._add(Failure(**data))

    async def get_failure(self, failure_id: RecordId) -> Failure | None:
        return await self._get(Failure, failure_id)

    async def list_failures(self, filters: FailureFilter) -> list[Failure]:
        query = select(Failure).order_by(Failure.timestamp.desc())
        if filters.repo:
            query = query.where(Failure.repo == filters.repo)
        if filters.status:
            query = query.where(Failure.status == filters.status)
        if filters.run_id:
            query = query.where(Failure.run_id == filters.run_id)
        if filters.since:
            query = query.where(Failure.timestamp >= filters.since)
        query = query.limit(filters.limit).offset(filters.offset)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def transition_failure(self, failure_id: RecordId, expected_status: str, new_status: str) -> bool:
        parsed = parse_id(failure_id)
        if parsed is None:
            return False
        result = await self.db.execute(
            update(Failure)
            .where(Failure.id == parsed, Failure.status == expected_status)
            .values(status=new_status)
        )
        return result.rowcount == 1

    async def count_suggestions(self, failure_ids: list[uuid.UUID]) -> dict[uuid.UUID, int]:
        if not failure_ids:
            return {}
        result = await self.db.execute(
            select(Suggestion.failure_id, func.count())
            .where(Suggestion.failure_id.in_(failure_ids))
            .group_by(Suggestion.failure_id)
        )
        return {failure_id: count for failure_id, count in result.all()}

    # Suggestions

    async def create_suggestion(
        self,
        failure_id: RecordId,
        candidates: list[dict[str, Any]],
        top_choice: str | None,
        explanation_of_failure: str | None = None,
    ) -> Suggestion:
        failure = await self.get_failure(failure_id)
        if failure is None:
            raise NotFoundError("Failure not found")

        created_at = datetime.utcnow()
        previous = await self.latest_suggestion(failure.id)
        if previous is not None and created_at <= previous.created_at:
            created_at = previous.created_at + timedelta(microseconds=1)

        return await self._add(
            Suggestion(
                failure_id=failure.id,
                candidates=candidates,
                top_choice=top_choice,
                explanation_of_failure=explanation_of_failure,
                created_at=created_at,
            )
        )

    async def get_suggestion(self, suggestion_id: RecordId) -> Suggestion | None:
        return await self._get(Suggestion, suggestion_id)

    async def list_suggestions(self, failure_id: RecordId) -> list[Suggestion]:
        parsed = parse_id(failure_id)
        if parsed is None:
            return []
        result = await self.db.execute(
            select(Suggestion)
            .where(Suggestion.failure_id == parsed)
            .order_by(Suggestion.created_at.desc(), Suggestion.id.desc())
        )
        return list(result.scalars().all())

    async def latest_suggestion(self, failure_id: RecordId) -> Suggestion | None:
        parsed = parse_id(failure_id)
        if parsed is None:
            return None
        result = await self.db.execute(
            select(Suggestion)
            .where(Suggestion.failure_id == parsed)
            .order_by(Suggestion.created_at.desc(), Suggestion.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    # Approvals

    async def create_approval(self, suggestion_id: RecordId, approved_by: str, decision: str, notes: str | None) -> Approval:
        suggestion = await self.get_suggestion(suggestion_id)
        if suggestion is None:
            raise NotFoundError("Suggestion not found")
        return await self._add(
            Approval(
                suggestion_id=suggestion.id,
                approved_by=approved_by,
                decision=decision,
                notes=notes,
            )
        )

    async def list_approvals(self, suggestion_id: RecordId) -> list[Approval]:
        parsed = parse_id(suggestion_id)
        if parsed is None:
            return []
        result = await self.db.execute(
            select(Approval)
            .where(Approval.suggestion_id == parsed)
            .order_by(Approval.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_recent_approvals(self, decision: str | None, limit: int) -> list[Approval]:
        query = select(Approval).order_by(Approval.created_at.desc()).limit(limit)
        if decision:
            query = query.where(Approval.decision == decision)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    # Selector catalog

    async def get_selector(self, page: str, name: str) -> Selector | None:
        result = await self.db.execute(
            select(Selector).where(Selector.page == page, Selector.name == name)
        )
        return result.scalar_one_or_none()

    async def list_selectors(self, page: str | None = None) -> list[Selector]:
        query = select(Selector).order_by(Selector.page, Selector.name)
        if page is not None:
            query = query.where(Selector.page == page)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def upsert_selector(self, page: str, name: str, current: str, history_entry: dict[str, Any]) -> Selector:
        selector = await self.get_selector(page, name)
        if selector is None:
            return await self._add(
                Selector(page=page, name=name, current=current, history=[history_entry])
            )

        selector.current = current
        # Reassign so the JSON column is flagged dirty
        selector.history = [*(selector.history or []), history_entry]
        await self.db.flush()
        return selector

    # Pull requests

    async def get_pull_request(self, suggestion_id: RecordId) -> PullRequest | None:
        parsed = parse_id(suggestion_id)
        if parsed is None:
            return None
        result = await self.db.execute(
            select(PullRequest).where(PullRequest.suggestion_id == parsed)
        )
        return result.scalar_one_or_none()

    async def save_pull_request(self, suggestion_id: RecordId, values: dict[str, Any]) -> PullRequest:
        pull_request = await self.get_pull_request(suggestion_id)
        if pull_request is None:
            suggestion = await self.get_suggestion(suggestion_id)
            if suggestion is None:
                raise NotFoundError("Suggestion not found")
            return await self._add(PullRequest(suggestion_id=suggestion.id, **values))

        for key, value in values.items():
            setattr(pull_request, key, value)
        await self.db.flush()
        return pull_request

    async def list_pull_requests(self, status: str | None, limit: int) -> list[PullRequest]:
        query = select(PullRequest).order_by(PullRequest.created_at.desc(), PullRequest.id.desc()).limit(limit)
        if status:
            query = query.where(PullRequest.status == status)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    # Dashboard aggregates

    async def failure_status_counts(self) -> dict[str, int]:
        return await self._counts(Failure.status)

    async def run_status_counts(self) -> dict[str, int]:
        return await self._counts(Run.status)

    async def approval_decision_counts(self) -> dict[str, int]:
        return await self._counts(Approval.decision)


async def get_storage(db: AsyncSession = Depends(get_db)) -> Storage:
    return SQLStorage(db)
