"""
Typed answers to form fields.

A ``FieldValue`` is a closed sum type: exactly one variant, each carrying the
payload for one kind of field. On the wire every variant is a single-key
object keyed by its tag:

    {"text": "hello"}
    {"number": 42}
    {"dateTime": 1735689600000000000}
    {"multipleChoices": ["a", "b"]}

Objects with a single key we do not know are parsed into ``UnsupportedValue``
so that stored records written by a newer vocabulary still load. Objects with
zero or several keys are invalid.
"""
from __future__ import annotations

import base64
from typing import Annotated, Any, ClassVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    StrictInt,
    StrictStr,
    Tag,
    TypeAdapter,
    field_serializer,
    field_validator,
    model_serializer,
    model_validator,
)


class FileBlob(BaseModel):
    """An uploaded file, held fully in memory."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    file_name: str = Field(alias="fileName", min_length=1)
    file_type: str = Field(default="application/octet-stream", alias="fileType")
    file_size: int | None = Field(default=None, alias="fileSize", ge=0)
    data: bytes = Field(alias="bytes", repr=False)

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_bytes(cls, v: Any) -> Any:
        # JSON carries base64; browsers sometimes send a plain list of byte ints
        if isinstance(v, str):
            return base64.b64decode(v, validate=True)
        if isinstance(v, list):
            return bytes(v)
        return v

    @model_validator(mode="after")
    def _fill_size(self) -> "FileBlob":
        if self.file_size is None:
            object.__setattr__(self, "file_size", len(self.data))
        return self

    @field_serializer("data", when_used="json")
    def _bytes_to_b64(self, v: bytes) -> str:
        return base64.b64encode(v).decode("ascii")


class _Variant(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    tag: ClassVar[str]

    @property
    def payload(self) -> Any:
        # every variant declares exactly one field
        (name,) = type(self).model_fields
        return getattr(self, name)


class TextValue(_Variant):
    tag: ClassVar[str] = "text"
    text: StrictStr


class NumberValue(_Variant):
    tag: ClassVar[str] = "number"
    number: StrictInt


class DateValue(_Variant):
    """Calendar date, nanoseconds since epoch (UTC midnight)."""

    tag: ClassVar[str] = "date"
    date: StrictInt


class DateTimeValue(_Variant):
    """Instant, nanoseconds since epoch."""

    tag: ClassVar[str] = "dateTime"
    date_time: StrictInt = Field(alias="dateTime")


class SingleChoiceValue(_Variant):
    tag: ClassVar[str] = "singleChoice"
    single_choice: StrictStr = Field(alias="singleChoice")


class MultipleChoicesValue(_Variant):
    tag: ClassVar[str] = "multipleChoices"
    multiple_choices: list[StrictStr] = Field(alias="multipleChoices")


class FileValue(_Variant):
    tag: ClassVar[str] = "file"
    file: FileBlob


class UnsupportedValue(BaseModel):
    """
    Marker for a value whose tag this build does not know.

    Keeps the original tag and payload so it can be passed through unchanged.
    """

    model_config = ConfigDict(frozen=True)

    tag: ClassVar[str] = "unsupported"

    kind: str
    raw: Any = None

    @model_validator(mode="before")
    @classmethod
    def _from_wire(cls, data: Any) -> Any:
        if isinstance(data, dict) and "kind" not in data and len(data) == 1:
            (kind, raw), = data.items()
            return {"kind": kind, "raw": raw}
        return data

    @model_serializer
    def _to_wire(self) -> dict[str, Any]:
        return {self.kind: self.raw}

    @property
    def payload(self) -> "UnsupportedValue":
        return self


VARIANTS: dict[str, type[_Variant]] = {
    v.tag: v
    for v in (
        TextValue,
        NumberValue,
        DateValue,
        DateTimeValue,
        SingleChoiceValue,
        MultipleChoicesValue,
        FileValue,
    )
}


def _value_tag(v: Any) -> str | None:
    if isinstance(v, dict):
        if len(v) != 1:
            return None
        (key,) = v.keys()
        return key if key in VARIANTS else UnsupportedValue.tag
    return getattr(v, "tag", None)


FieldValue = Annotated[
    Union[
        Annotated[TextValue, Tag("text")],
        Annotated[NumberValue, Tag("number")],
        Annotated[DateValue, Tag("date")],
        Annotated[DateTimeValue, Tag("dateTime")],
        Annotated[SingleChoiceValue, Tag("singleChoice")],
        Annotated[MultipleChoicesValue, Tag("multipleChoices")],
        Annotated[FileValue, Tag("file")],
        Annotated[UnsupportedValue, Tag("unsupported")],
    ],
    Discriminator(_value_tag),
]

field_value_adapter: TypeAdapter[FieldValue] = TypeAdapter(FieldValue)


def parse_field_value(raw: Any) -> FieldValue:
    """Wire object -> FieldValue. Unknown single tags become UnsupportedValue."""
    return field_value_adapter.validate_python(raw)


def dump_field_value(value: FieldValue) -> dict[str, Any]:
    """FieldValue -> JSON-safe wire object."""
    return field_value_adapter.dump_python(value, mode="json", by_alias=True)
