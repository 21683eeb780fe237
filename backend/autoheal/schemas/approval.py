from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import model_validator

from autoheal.schemas.common import CamelModel


class ApprovalCreate(CamelModel):
    """Reviewer decision on a suggestion."""
    suggestion_id: str
    decision: Literal["approve", "reject"]
    approved_by: str | None = None  # Defaults to the signed-in user
    notes: str | None = None

    # Catalog entry to update when the suggestion is approved
    selector_page: str | None = None
    selector_name: str | None = None

    @model_validator(mode="after")
    def check_selector_key(self):
        if (self.selector_page is None) != (self.selector_name is None):
            raise ValueError("selectorPage and selectorName must be given together")
        return self


class ApprovalResponse(CamelModel):
    id: UUID
    suggestion_id: UUID
    approved_by: str
    decision: str
    notes: str | None = None
    created_at: datetime
