from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from taskforms.core.field_values import FieldValue


class FieldEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    field_id: str = Field(alias="fieldId", min_length=1)
    value: FieldValue


class EncodedSubmission(BaseModel):
    """A validated, typed submission ready to be stored."""

    model_config = ConfigDict(populate_by_name=True)

    form_id: str = Field(alias="formId")
    version: int = Field(ge=1)
    task_id: str | None = Field(default=None, alias="taskId")
    data: list[FieldEntry]
    submitted_by: str = Field(alias="submittedBy")
    submitted_at: int = Field(alias="submittedAt")


class FormSubmissionIn(BaseModel):
    """
    Either raw editor state (``values``) which the server encodes, or
    already-encoded ``data`` entries which the server checks.
    """

    model_config = ConfigDict(populate_by_name=True)

    form_id: str = Field(alias="formId")
    version: int | None = Field(default=None, ge=1)  # None = current version
    values: dict[str, Any] | None = None
    data: list[FieldEntry] | None = None

    @model_validator(mode="after")
    def _one_payload(self) -> "FormSubmissionIn":
        if (self.values is None) == (self.data is None):
            raise ValueError("Provide exactly one of 'values' or 'data'")
        return self


class FormSubmissionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    form_id: str = Field(alias="formId")
    version: int
    task_id: str | None = Field(default=None, alias="taskId")
    data: list[FieldEntry]
    submitted_by: str = Field(alias="submittedBy")
    submitted_at: int = Field(alias="submittedAt")


class DisplayField(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    field_label: str = Field(alias="fieldLabel")
    field_type: str = Field(alias="fieldType")
    value: Any = None


class SubmissionDisplayOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    submission_id: str = Field(alias="submissionId")
    form_id: str = Field(alias="formId")
    # None once the definition has been deleted
    form_name: str | None = Field(default=None, alias="formName")
    version: int
    fields: list[DisplayField]
