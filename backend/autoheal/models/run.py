import uuid
from datetime import datetime
from sqlalchemy import String, Integer, DateTime, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from autoheal.db.database import Base


class Run(Base):
    """A CI run of the end-to-end suite."""
    __tablename__ = "runs"
    __table_args__ = (
        Index("ix_runs_repo_status_started_at", "repo", "status", "started_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    repo: Mapped[str] = mapped_column(String(255), index=True)
    branch: Mapped[str] = mapped_column(String(255))
    commit: Mapped[str] = mapped_column(String(64))
    ci_run_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(20), default="running", index=True)  # running, completed, failed
    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    total_tests: Mapped[int | None] = mapped_column(Integer, nullable=True)
    passed_tests: Mapped[int | None] = mapped_column(Integer, nullable=True)
    failed_tests: Mapped[int | None] = mapped_column(Integer, nullable=True)
