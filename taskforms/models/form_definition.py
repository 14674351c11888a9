from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskforms.core.timestamps import utcnow
from taskforms.db.base import Base, new_id


class FormDefinition(Base):
    __tablename__ = "form_definitions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # bumped whenever the field list changes; each version is snapshotted
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    creator_user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    fields = relationship(
        "FormField",
        back_populates="form",
        cascade="all, delete-orphan",
        order_by="FormField.position",
        lazy="selectin",
    )
    versions = relationship(
        "FormDefinitionVersion",
        back_populates="form",
        cascade="all, delete-orphan",
        order_by="FormDefinitionVersion.version",
        lazy="select",
    )
