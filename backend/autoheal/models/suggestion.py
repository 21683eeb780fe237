import uuid
from datetime import datetime
from sqlalchemy import String, Text, DateTime, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from autoheal.db.database import Base


class Suggestion(Base):
    """Ranked replacement selectors proposed for one failure."""
    __tablename__ = "suggestions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    failure_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True)

    # Ordered list of {selector, matchType, rationale, confidence, source}
    candidates: Mapped[list] = mapped_column(JSON)
    top_choice: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    # Why the old selector stopped matching, shown to the reviewer
    explanation_of_failure: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    @property
    def chosen_selector(self) -> str | None:
        if self.top_choice:
            return self.top_choice
        if self.candidates:
            return self.candidates[0].get("selector")
        return None
