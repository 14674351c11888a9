from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskforms.core.timestamps import utcnow
from taskforms.db.base import Base, JSONType, new_id


class FormDefinitionVersion(Base):
    """Frozen copy of a definition's fields as they were at one version."""

    __tablename__ = "form_definition_versions"
    __table_args__ = (
        UniqueConstraint("form_definition_id", "version", name="uq_form_definition_version"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    form_definition_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("form_definitions.id", ondelete="CASCADE"),
        nullable=False,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    # list of field dicts in wire shape, in order
    fields: Mapped[list] = mapped_column(JSONType, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    form = relationship("FormDefinition", back_populates="versions")
