from uuid import UUID

from pydantic import Field

from autoheal.schemas.common import CamelModel


class SelectorUpdate(CamelModel):
    selector: str = Field(min_length=1)
    commit: str = Field(min_length=1)
    approved_by: str | None = None


class SelectorHistoryEntry(CamelModel):
    selector: str
    commit: str
    approved_at: str  # ISO-8601, as stored
    approved_by: str | None = None


class SelectorResponse(CamelModel):
    id: UUID
    page: str
    name: str
    current: str
    history: list[SelectorHistoryEntry]
