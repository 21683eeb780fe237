import uuid
from datetime import datetime
from sqlalchemy import String, Text, DateTime, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from autoheal.db.database import Base


class PullRequest(Base):
    """GitHub pull request carrying an approved selector into the test repo."""
    __tablename__ = "pull_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    suggestion_id: Mapped[uuid.UUID] = mapped_column(Uuid, unique=True, index=True)
    approval_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    failure_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True)

    branch_name: Mapped[str] = mapped_column(String(255))
    # Catalog key (page.name) to write into the selector map, if the reviewer gave one
    selector_key: Mapped[str | None] = mapped_column(String(511), nullable=True)

    # Status: pending, open, failed
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    pr_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    pr_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
