"""
Two-way mapping between loosely typed editor state and typed submissions.

Encoding always dispatches on the field's declared type (one codec per type),
never on the runtime type of the editor value. A value whose shape does not
fit the declared type is rejected rather than guessed at.
"""
from __future__ import annotations

import logging
import re
from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from taskforms.core import validation
from taskforms.core.errors import (
    DuplicateFieldId,
    FieldTypeMismatch,
    FormValidationFailed,
    FormValueError,
    InvalidDateInput,
    InvalidNumericInput,
    InvalidRuleBounds,
    MissingRequiredField,
    UnexpectedValueShape,
    UnknownFieldReference,
    UnknownFieldType,
)
from taskforms.core.field_types import FieldType, applicable_rules, value_tag
from taskforms.core.field_values import (
    DateTimeValue,
    DateValue,
    FieldValue,
    FileBlob,
    FileValue,
    MultipleChoicesValue,
    NumberValue,
    SingleChoiceValue,
    TextValue,
    UnsupportedValue,
    VARIANTS,
)
from taskforms.core.timestamps import date_to_nanos, datetime_to_nanos, now_nanos
from taskforms.schemas.forms import FormFieldSpec, ValidationRules
from taskforms.schemas.submissions import EncodedSubmission, FieldEntry

logger = logging.getLogger(__name__)

_ANY_VARIANT = tuple(VARIANTS.values()) + (UnsupportedValue,)
_WHOLE_NUMBER = re.compile(r"-?[0-9]+")
_BOUND_RULES = ("min_length", "max_length", "min_value", "max_value")


class FieldCodec:
    """Turns one editor value into the FieldValue variant for a field type."""

    variant: type = TextValue
    expected = "a string"

    def encode(self, field_id: str, raw: Any) -> FieldValue:
        if isinstance(raw, self.variant):
            return raw
        if isinstance(raw, _ANY_VARIANT):
            raise FieldTypeMismatch(field_id, self.variant.tag, raw.tag)
        return self.coerce(field_id, raw)

    def coerce(self, field_id: str, raw: Any) -> FieldValue:
        raise NotImplementedError


class TextCodec(FieldCodec):
    variant = TextValue

    def coerce(self, field_id, raw):
        if not isinstance(raw, str):
            raise UnexpectedValueShape(field_id, raw, self.expected)
        return TextValue(text=raw)


class NumberCodec(FieldCodec):
    variant = NumberValue
    expected = "a whole number"

    def coerce(self, field_id, raw):
        # bool is an int subclass; a checkbox value is not a number
        if isinstance(raw, bool):
            raise InvalidNumericInput(field_id, raw)
        if isinstance(raw, int):
            return NumberValue(number=raw)
        if isinstance(raw, float):
            if not raw.is_integer():
                raise InvalidNumericInput(field_id, raw)
            return NumberValue(number=int(raw))
        if isinstance(raw, str):
            # int() alone would also take "1_000", "+5" and non-ASCII digits
            s = raw.strip()
            if not _WHOLE_NUMBER.fullmatch(s):
                raise InvalidNumericInput(field_id, raw)
            return NumberValue(number=int(s))
        raise UnexpectedValueShape(field_id, raw, self.expected)


class DateCodec(FieldCodec):
    variant = DateValue
    expected = "an ISO date YYYY-MM-DD"

    def coerce(self, field_id, raw):
        if isinstance(raw, bool):
            raise UnexpectedValueShape(field_id, raw, self.expected)
        if isinstance(raw, int):
            return DateValue(date=raw)
        if isinstance(raw, datetime):
            return DateValue(date=date_to_nanos(raw.date()))
        if isinstance(raw, date):
            return DateValue(date=date_to_nanos(raw))
        if isinstance(raw, str):
            try:
                return DateValue(date=date_to_nanos(date.fromisoformat(raw.strip())))
            except ValueError:
                raise InvalidDateInput(field_id, raw, self.expected)
        raise UnexpectedValueShape(field_id, raw, self.expected)


class DateTimeCodec(FieldCodec):
    variant = DateTimeValue
    expected = "an ISO datetime"

    def coerce(self, field_id, raw):
        if isinstance(raw, bool):
            raise UnexpectedValueShape(field_id, raw, self.expected)
        if isinstance(raw, int):
            return DateTimeValue(date_time=raw)
        if isinstance(raw, datetime):
            return DateTimeValue(date_time=datetime_to_nanos(raw))
        if isinstance(raw, str):
            s = raw.strip()
            if s.endswith("Z"):
                s = s[:-1] + "+00:00"
            try:
                dt = datetime.fromisoformat(s)
            except ValueError:
                raise InvalidDateInput(field_id, raw, self.expected)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return DateTimeValue(date_time=datetime_to_nanos(dt))
        raise UnexpectedValueShape(field_id, raw, self.expected)


class SingleChoiceCodec(FieldCodec):
    variant = SingleChoiceValue
    expected = "a single choice"

    def coerce(self, field_id, raw):
        if not isinstance(raw, str):
            raise UnexpectedValueShape(field_id, raw, self.expected)
        return SingleChoiceValue(single_choice=raw)


class MultipleChoicesCodec(FieldCodec):
    variant = MultipleChoicesValue
    expected = "a list of choices"

    def coerce(self, field_id, raw):
        if not isinstance(raw, (list, tuple)) or not all(isinstance(c, str) for c in raw):
            raise UnexpectedValueShape(field_id, raw, self.expected)
        return MultipleChoicesValue(multiple_choices=list(raw))


class FileCodec(FieldCodec):
    variant = FileValue
    expected = "a file"

    def coerce(self, field_id, raw):
        if isinstance(raw, FileBlob):
            return FileValue(file=raw)
        if isinstance(raw, (bytes, bytearray)):
            return FileValue(file=FileBlob(file_name="upload.bin", data=bytes(raw)))
        if isinstance(raw, Mapping):
            try:
                return FileValue(file=FileBlob.model_validate(dict(raw)))
            except ValidationError:
                raise UnexpectedValueShape(field_id, raw, self.expected)
        raise UnexpectedValueShape(field_id, raw, self.expected)


CODECS: dict[FieldType, FieldCodec] = {
    FieldType.single_line: TextCodec(),
    FieldType.multi_line: TextCodec(),
    FieldType.number_: NumberCodec(),
    FieldType.date: DateCodec(),
    FieldType.date_time: DateTimeCodec(),
    FieldType.dropdown: SingleChoiceCodec(),
    FieldType.multi_select: MultipleChoicesCodec(),
    FieldType.file_upload: FileCodec(),
}


def _codec_for(field: FormFieldSpec) -> FieldCodec:
    try:
        return CODECS[FieldType.from_label(field.field_type)]
    except UnknownFieldType as e:
        raise UnknownFieldType(e.field_type, field_id=field.id)


def _is_absent(raw: Any) -> bool:
    if raw is None:
        return True
    if isinstance(raw, str) and raw.strip() == "":
        return True
    if isinstance(raw, (list, tuple)) and len(raw) == 0:
        return True
    return False


def encode_field_value(field: FormFieldSpec, raw: Any) -> FieldValue:
    """Editor value -> FieldValue, chosen by the field's declared type."""
    return _codec_for(field).encode(field.id, raw)


def decode_field_value(value: FieldValue) -> Any:
    """FieldValue -> its payload, whichever variant it is. Unknown tags stay as the marker."""
    return value.payload


def display_value(value: FieldValue | None) -> Any:
    """Like decode_field_value, but JSON-friendly for read-only display."""
    if value is None:
        return None
    payload = decode_field_value(value)
    if isinstance(payload, FileBlob):
        return {"fileName": payload.file_name, "fileType": payload.file_type, "fileSize": payload.file_size}
    if isinstance(payload, UnsupportedValue):
        return {"unsupported": payload.kind}
    return payload


def encode_submission(
    definition,
    editor_state: Mapping[str, Any],
    *,
    submitted_by: str,
    task_id: str | None = None,
    submitted_at: int | None = None,
) -> EncodedSubmission:
    """
    Validate + encode a whole form.

    ``definition`` is anything with ``id``, ``version`` and ordered ``fields``.
    Fields left empty and not required are omitted. Every error is collected;
    if there are any, FormValidationFailed is raised and nothing is produced.
    """
    errors: list[FormValueError] = []
    entries: list[FieldEntry] = []
    known = {f.id for f in definition.fields}

    for key in editor_state.keys():
        if key not in known:
            errors.append(UnknownFieldReference(key))

    for field in definition.fields:
        raw = editor_state.get(field.id)
        if _is_absent(raw):
            if field.required:
                errors.append(MissingRequiredField(field.id))
            continue

        try:
            value = encode_field_value(field, raw)
        except FormValueError as e:
            e.field_id = field.id
            errors.append(e)
            continue

        field_errors = validation.evaluate(field, value)
        if field_errors:
            errors.extend(field_errors)
            continue
        entries.append(FieldEntry(field_id=field.id, value=value))

    if errors:
        logger.debug("Rejected submission for form %s: %d error(s)", definition.id, len(errors))
        raise FormValidationFailed(errors)

    return EncodedSubmission(
        form_id=definition.id,
        version=definition.version,
        task_id=task_id,
        data=entries,
        submitted_by=submitted_by,
        submitted_at=submitted_at if submitted_at is not None else now_nanos(),
    )


def validate_entries(definition, entries: Iterable[FieldEntry]) -> list[FieldEntry]:
    """
    Check already-encoded entries against a definition: ids must exist and be
    unique, tags must match the declared type, rules must hold, and every
    required field must be answered.
    """
    errors: list[FormValueError] = []
    fields = {f.id: f for f in definition.fields}
    seen: dict[str, FieldValue] = {}
    out: list[FieldEntry] = []

    for entry in entries:
        field = fields.get(entry.field_id)
        if field is None:
            errors.append(UnknownFieldReference(entry.field_id))
            continue
        if entry.field_id in seen:
            errors.append(DuplicateFieldId(entry.field_id))
            continue
        seen[entry.field_id] = entry.value

        expected = value_tag(field.field_type)
        if entry.value.tag != expected:
            errors.append(FieldTypeMismatch(field.id, expected, entry.value.tag))
            continue

        field_errors = validation.evaluate(field, entry.value)
        if field_errors:
            errors.extend(field_errors)
            continue
        # an empty optional answer is stored as no entry at all
        if validation.is_empty(entry.value):
            continue
        out.append(entry)

    for field in definition.fields:
        # empty required entries were already reported by evaluate()
        if field.required and field.id not in seen:
            errors.append(MissingRequiredField(field.id))

    if errors:
        raise FormValidationFailed(errors)

    # keep definition order
    order = {f.id: i for i, f in enumerate(definition.fields)}
    return sorted(out, key=lambda e: order[e.field_id])


def decode_submission(definition, entries: Iterable[FieldEntry]) -> dict[str, Any]:
    """{field_id: payload} for every field of the definition, None if unanswered."""
    by_id = {e.field_id: e.value for e in entries}
    return {
        f.id: (decode_field_value(by_id[f.id]) if f.id in by_id else None)
        for f in definition.fields
    }


def _normalize_rules(field_id: str, field_type: FieldType, rules: ValidationRules | None) -> ValidationRules | None:
    if rules is None:
        return None

    # rules the field type never checks are dropped rather than stored
    applicable = applicable_rules(field_type)
    rules = rules.model_copy(
        update={name: None for name in _BOUND_RULES if name not in applicable}
    )

    if rules.min_length is not None and rules.max_length is not None and rules.min_length > rules.max_length:
        raise InvalidRuleBounds(field_id, "minLength", "maxLength")
    if rules.min_value is not None and rules.max_value is not None and rules.min_value > rules.max_value:
        raise InvalidRuleBounds(field_id, "minValue", "maxValue")

    return None if rules.is_default() else rules


def normalize_form_field(field: FormFieldSpec) -> FormFieldSpec:
    """
    Collapse placeholder structures to unset so stored definitions compare
    cleanly. Raises InvalidRuleBounds when a lower bound exceeds its upper one.
    """
    field_type = FieldType.from_label(field.field_type)
    validations = _normalize_rules(field.id, field_type, field.validations)

    options = field.options if field.options else None

    master_list_ref = field.master_list_ref
    if master_list_ref is not None:
        master_list_ref = master_list_ref.strip() or None

    return field.model_copy(
        update={
            "field_type": field_type,
            "validations": validations,
            "options": options,
            "master_list_ref": master_list_ref,
        }
    )


def normalize_form_definition(definition):
    """
    Normalize every field of a definition (create/update payload or stored
    definition). Field ids must be unique and rule bounds consistent; every
    problem is collected before raising.
    """
    seen: set[str] = set()
    errors: list[FormValueError] = []
    fields: list[FormFieldSpec] = []
    for f in definition.fields:
        if f.id in seen:
            errors.append(DuplicateFieldId(f.id))
        seen.add(f.id)
        try:
            fields.append(normalize_form_field(f))
        except FormValueError as e:
            errors.append(e)
    if errors:
        raise FormValidationFailed(errors, message="Form definition is invalid")

    return definition.model_copy(update={"fields": fields})
