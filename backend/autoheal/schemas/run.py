from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field, model_validator

from autoheal.schemas.common import CamelModel


class RunCreate(CamelModel):
    repo: str = Field(min_length=1)
    branch: str = Field(min_length=1)
    commit: str = Field(min_length=1)
    ci_run_id: str | None = None


class RunComplete(CamelModel):
    status: Literal["completed", "failed"]
    total_tests: int | None = Field(default=None, ge=0)
    passed_tests: int | None = Field(default=None, ge=0)
    failed_tests: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_totals(self):
        if self.total_tests is not None:
            counted = (self.passed_tests or 0) + (self.failed_tests or 0)
            if counted > self.total_tests:
                raise ValueError("passedTests + failedTests cannot exceed totalTests")
        return self


class RunResponse(CamelModel):
    id: UUID
    repo: str
    branch: str
    commit: str
    ci_run_id: str | None = None
    status: str
    started_at: datetime
    completed_at: datetime | None = None
    total_tests: int | None = None
    passed_tests: int | None = None
    failed_tests: int | None = None
