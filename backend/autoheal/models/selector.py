import uuid
from sqlalchemy import String, JSON, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from autoheal.db.database import Base


class Selector(Base):
    """Currently accepted selector for a logical element, with its change history."""
    __tablename__ = "selectors"
    __table_args__ = (
        UniqueConstraint("page", "name", name="uq_selectors_page_name"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    page: Mapped[str] = mapped_column(String(255), index=True)
    name: Mapped[str] = mapped_column(String(255))
    current: Mapped[str] = mapped_column(String(1000))
    # List of {selector, commit, approvedAt, approvedBy}
    history: Mapped[list] = mapped_column(JSON, default=list)
