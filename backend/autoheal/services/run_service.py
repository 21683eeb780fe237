"""CI run lifecycle: running -> completed | failed."""

import logging
from datetime import datetime

from autoheal.exceptions import NotFoundError, StateConflictError
from autoheal.models import Failure, Run
from autoheal.schemas.run import RunComplete, RunCreate
from autoheal.services.workflow import RUN_RUNNING
from autoheal.storage import FailureFilter, Storage

logger = logging.getLogger(__name__)


class RunService:
    def __init__(self, storage: Storage):
        self.storage = storage

    async def start(self, data: RunCreate) -> Run:
        run = await self.storage.create_run(
            {**data.model_dump(), "status": RUN_RUNNING, "started_at": datetime.utcnow()}
        )
        await self.storage.commit()
        logger.info("Run %s started for %s@%s (%s)", run.id, run.repo, run.branch, run.commit)
        return run

    async def get(self, run_id: str) -> Run:
        run = await self.storage.get_run(run_id)
        if not run:
            raise NotFoundError("Run not found")
        return run

    async def finish(self, run_id: str, data: RunComplete) -> Run:
        run = await self.get(run_id)
        if run.status != RUN_RUNNING:
            raise StateConflictError(f"Run already {run.status}")

        values = {"status": data.status, "completed_at": datetime.utcnow()}
        for field in ("total_tests", "passed_tests", "failed_tests"):
            value = getattr(data, field)
            if value is not None:
                values[field] = value

        updated = await self.storage.update_run(run.id, RUN_RUNNING, values)
        if updated is None:
            await self.storage.rollback()
            raise StateConflictError("Run was finished concurrently")
        await self.storage.commit()

        logger.info("Run %s %s", updated.id, updated.status)
        return updated

    async def failures(self, run_id: str, limit: int, offset: int) -> list[Failure]:
        run = await self.get(run_id)
        return await self.storage.list_failures(
            FailureFilter(run_id=str(run.id), limit=limit, offset=offset)
        )
