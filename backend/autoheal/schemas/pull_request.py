from datetime import datetime
from uuid import UUID

from autoheal.schemas.common import CamelModel


class PullRequestResponse(CamelModel):
    id: UUID
    suggestion_id: UUID
    approval_id: UUID
    failure_id: UUID
    branch_name: str
    selector_key: str | None = None
    status: str
    pr_number: int | None = None
    pr_url: str | None = None
    error: str | None = None
    created_at: datetime
    updated_at: datetime
