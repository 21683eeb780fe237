"""Schemas for failure ingestion and the failure views."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field

from autoheal.schemas.common import CamelModel
from autoheal.schemas.suggestion import SuggestionResponse


class FailureCreate(CamelModel):
    """Payload posted by the Cypress plugin when a selector cannot be found.

    Server-owned fields (id, timestamp, status) are ignored if sent.
    """
    run_id: str = Field(min_length=1)
    repo: str = Field(min_length=1)
    branch: str = Field(min_length=1)
    commit: str = Field(min_length=1)
    suite: str
    test: str
    spec_path: str
    browser: str
    viewport: str
    dom_html: str = Field(min_length=1)
    current_selector: str = Field(min_length=1)
    selector_context: dict[str, Any]  # element, text, className, position, domPath, ...

    screenshot_path: str | None = None
    console_logs: list[Any] = Field(default_factory=list)
    network_logs: list[Any] = Field(default_factory=list)
    error_message: str | None = None


class FailureResponse(CamelModel):
    id: UUID
    run_id: str
    repo: str
    branch: str
    commit: str
    suite: str
    test: str
    spec_path: str
    browser: str
    viewport: str
    timestamp: datetime
    screenshot_path: str | None = None
    dom_html: str
    console_logs: list[Any]
    network_logs: list[Any]
    current_selector: str
    selector_context: dict[str, Any]
    error_message: str | None = None
    status: str


class FailureListItem(FailureResponse):
    suggestion_count: int = 0


class FailureDetail(FailureResponse):
    suggestions: list[SuggestionResponse] = []
