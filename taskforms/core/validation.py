from __future__ import annotations

from typing import Any

from taskforms.core.errors import (
    FormValueError,
    InvalidChoice,
    LengthOutOfRange,
    MissingRequiredField,
    ValueOutOfRange,
)
from taskforms.core.field_values import (
    FieldValue,
    MultipleChoicesValue,
    NumberValue,
    SingleChoiceValue,
    TextValue,
)
from taskforms.schemas.forms import FormFieldSpec


def is_empty(value: FieldValue | None) -> bool:
    if value is None:
        return True
    if isinstance(value, TextValue):
        return value.text.strip() == ""
    if isinstance(value, SingleChoiceValue):
        return value.single_choice.strip() == ""
    if isinstance(value, MultipleChoicesValue):
        return len(value.multiple_choices) == 0
    return False


def evaluate(field: FormFieldSpec, value: FieldValue | None) -> list[FormValueError]:
    """
    Submit-level checks for one field: required + declared bounds.
    Returns list of errors (empty if ok).
    """
    errors: list[FormValueError] = []
    rules = field.validations

    if is_empty(value):
        if rules is not None and rules.required:
            errors.append(MissingRequiredField(field.id))
        return errors

    if rules is not None and not rules.is_default():
        if isinstance(value, (TextValue, SingleChoiceValue)):
            n = len(value.payload)
            if (rules.min_length is not None and n < rules.min_length) or (
                rules.max_length is not None and n > rules.max_length
            ):
                errors.append(LengthOutOfRange(field.id, n, rules.min_length, rules.max_length))

        elif isinstance(value, NumberValue):
            x = value.number
            if (rules.min_value is not None and x < rules.min_value) or (
                rules.max_value is not None and x > rules.max_value
            ):
                errors.append(ValueOutOfRange(field.id, x, rules.min_value, rules.max_value))

    # explicit options restrict the allowed choices; lookups via masterListRef are not checked here
    if field.options:
        allowed = {o.value for o in field.options}
        chosen: list[Any] = []
        if isinstance(value, SingleChoiceValue):
            chosen = [value.single_choice]
        elif isinstance(value, MultipleChoicesValue):
            chosen = list(value.multiple_choices)
        for c in chosen:
            if c not in allowed:
                errors.append(InvalidChoice(field.id, c))

    return errors


def check(field: FormFieldSpec, value: FieldValue | None) -> None:
    """Raise the first error for ``field``, if any."""
    errors = evaluate(field, value)
    if errors:
        raise errors[0]
