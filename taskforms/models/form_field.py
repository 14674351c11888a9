from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from taskforms.db.base import Base, JSONType, new_id


class FormField(Base):
    __tablename__ = "form_fields"
    __table_args__ = (
        UniqueConstraint("form_definition_id", "field_key", name="uq_form_field_key"),
        UniqueConstraint("form_definition_id", "position", name="uq_form_field_position"),
        CheckConstraint(
            "field_type IN ('singleLine','multiLine','number','date','dateTime',"
            "'dropdown','multiSelect','fileUpload')",
            name="ck_form_fields_type",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    form_definition_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("form_definitions.id", ondelete="CASCADE"),
        nullable=False,
    )

    # the field id submissions refer to; unique within its definition
    field_key: Mapped[str] = mapped_column(String(120), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    field_label: Mapped[str] = mapped_column(String(200), nullable=False)
    field_type: Mapped[str] = mapped_column(String(40), nullable=False)

    # {"required": true, "minLength": 2, "maxLength": 5}
    validations: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    # [{"value": "hi", "fieldLabel": "High"}]
    options: Mapped[list | None] = mapped_column(JSONType, nullable=True)
    master_list_ref: Mapped[str | None] = mapped_column(String(120), nullable=True)

    form = relationship("FormDefinition", back_populates="fields")
