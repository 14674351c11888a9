from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from taskforms.core.timestamps import utcnow
from taskforms.db.base import Base, JSONType, new_id

FIXED_MASTER_TYPES = ("departments", "categories", "statuses", "priorities", "taskTypes")


class MasterList(Base):
    """Admin-defined lookup list that dropdown / multi-select fields can reference."""

    __tablename__ = "master_lists"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)

    # [{"value": "eu", "itemLabel": "Europe"}]
    items: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class FixedMasterEntry(Base):
    """One row of a built-in master (departments, categories, ...)."""

    __tablename__ = "fixed_master_entries"
    __table_args__ = (
        UniqueConstraint("master_type", "name", name="uq_fixed_master_name"),
        CheckConstraint(
            "master_type IN ('departments','categories','statuses','priorities','taskTypes')",
            name="ck_fixed_master_type",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    master_type: Mapped[str] = mapped_column(String(40), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
