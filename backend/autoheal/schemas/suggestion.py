"""Schemas for suggested replacement selectors."""

from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, Field, model_validator

from autoheal.schemas.common import CamelModel


class Candidate(CamelModel):
    """One proposed replacement selector, as produced by the healing engine."""
    selector: str = Field(min_length=1)
    match_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("matchType", "type", "match_type"),
        serialization_alias="matchType",
    )  # e.g. data-testid, text, css, xpath
    rationale: str | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    source: str | None = None  # heuristic, llm, ...


class SuggestionCreate(CamelModel):
    failure_id: str
    candidates: list[Candidate] = Field(min_length=1)
    top_choice: str | None = None
    explanation_of_failure: str | None = None

    @model_validator(mode="after")
    def resolve_top_choice(self):
        selectors = [candidate.selector for candidate in self.candidates]
        if self.top_choice is None:
            # Candidates arrive ranked; the first one is the engine's pick
            self.top_choice = selectors[0]
        elif self.top_choice not in selectors:
            raise ValueError("topChoice must be one of the candidate selectors")
        return self

    def stored_candidates(self) -> list[dict]:
        return [
            candidate.model_dump(by_alias=True, exclude_unset=True)
            for candidate in self.candidates
        ]


class SuggestionResponse(CamelModel):
    id: UUID
    failure_id: UUID
    candidates: list[Candidate]
    top_choice: str | None = None
    explanation_of_failure: str | None = None
    created_at: datetime
