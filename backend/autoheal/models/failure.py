"""Database model for captured test failures."""

import uuid
from datetime import datetime
from sqlalchemy import String, Text, DateTime, Index, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from autoheal.db.database import Base


class Failure(Base):
    """A failing Cypress step whose target selector could not be found."""
    __tablename__ = "failures"
    __table_args__ = (
        Index("ix_failures_repo_status_timestamp", "repo", "status", "timestamp"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Loose reference: CI may report a run id this service never saw
    run_id: Mapped[str] = mapped_column(String(255), index=True)

    # Source control snapshot at capture time
    repo: Mapped[str] = mapped_column(String(255))
    branch: Mapped[str] = mapped_column(String(255))
    commit: Mapped[str] = mapped_column(String(64))

    # Test identity
    suite: Mapped[str] = mapped_column(String(500))
    test: Mapped[str] = mapped_column(String(500))
    spec_path: Mapped[str] = mapped_column(String(500))
    browser: Mapped[str] = mapped_column(String(50))
    viewport: Mapped[str] = mapped_column(String(50))
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Captured artifacts, stored exactly as reported (plain JSON keeps key order)
    screenshot_path: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    dom_html: Mapped[str] = mapped_column(Text)
    console_logs: Mapped[list] = mapped_column(JSON, default=list)
    network_logs: Mapped[list] = mapped_column(JSON, default=list)

    current_selector: Mapped[str] = mapped_column(String(1000))
    selector_context: Mapped[dict] = mapped_column(JSON)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Status: new, suggested, approved, rejected
    status: Mapped[str] = mapped_column(String(20), default="new", index=True)
