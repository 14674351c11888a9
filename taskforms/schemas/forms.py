from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskforms.core.field_types import FieldType


class _Wire(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(populate_by_name=True)


class FieldOption(_Wire):
    value: str = Field(min_length=1, max_length=200)
    field_label: str = Field(alias="fieldLabel", max_length=200)


class ValidationRules(_Wire):
    required: bool = False
    min_length: int | None = Field(default=None, alias="minLength", ge=0)
    max_length: int | None = Field(default=None, alias="maxLength", ge=0)
    min_value: int | None = Field(default=None, alias="minValue")
    max_value: int | None = Field(default=None, alias="maxValue")

    def is_default(self) -> bool:
        return (
            not self.required
            and self.min_length is None
            and self.max_length is None
            and self.min_value is None
            and self.max_value is None
        )


class FormFieldSpec(_Wire):
    id: str = Field(min_length=1, max_length=120)
    field_label: str = Field(alias="fieldLabel", min_length=1, max_length=200)
    field_type: FieldType = Field(alias="fieldType")
    validations: ValidationRules | None = None
    options: list[FieldOption] | None = None
    # fixed master name ("departments", ...) or a master list id
    master_list_ref: str | None = Field(default=None, alias="masterListRef", max_length=120)

    @field_validator("field_type", mode="before")
    @classmethod
    def _canonical_type(cls, v: Any) -> FieldType:
        return FieldType.from_label(v)

    @property
    def required(self) -> bool:
        return bool(self.validations and self.validations.required)


class FormDefinitionCreate(_Wire):
    name: str = Field(min_length=1, max_length=200)
    fields: list[FormFieldSpec] = Field(default_factory=list)


class FormDefinitionUpdate(FormDefinitionCreate):
    pass


class FormDefinitionOut(_Wire):
    id: str
    name: str
    version: int = Field(ge=1)
    creator: str
    created: int  # ns since epoch
    last_updated: int = Field(alias="lastUpdated")
    fields: list[FormFieldSpec]

    def field_map(self) -> dict[str, FormFieldSpec]:
        return {f.id: f for f in self.fields}


class FormDefinitionVersionOut(_Wire):
    form_id: str = Field(alias="formId")
    version: int
    name: str
    fields: list[FormFieldSpec]
    created: int
