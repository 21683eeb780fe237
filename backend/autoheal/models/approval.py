import uuid
from datetime import datetime
from sqlalchemy import String, Text, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from autoheal.db.database import Base


class Approval(Base):
    """Append-only record of a reviewer's decision on a suggestion."""
    __tablename__ = "approvals"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    suggestion_id: Mapped[uuid.UUID] = mapped_column(Uuid, index=True)
    approved_by: Mapped[str] = mapped_column(String(255))
    decision: Mapped[str] = mapped_column(String(20), index=True)  # approve, reject
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
