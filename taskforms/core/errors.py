from __future__ import annotations

from typing import Any


class FormValueError(ValueError):
    """
    A recoverable problem with one field of a form.

    Serializes to the same error-dict shape the API returns:
      {"field": "<field id>", "code": "<code>", "message": "<text>"}
    """

    code = "invalid"

    def __init__(self, field_id: str | None, message: str):
        super().__init__(message)
        self.field_id = field_id
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"field": self.field_id, "code": self.code, "message": self.message}


# input errors


class MissingRequiredField(FormValueError):
    code = "required"

    def __init__(self, field_id: str):
        super().__init__(field_id, "Required")


class LengthOutOfRange(FormValueError):
    code = "length"

    def __init__(self, field_id: str, length: int, min_length: int | None, max_length: int | None):
        if min_length is not None and length < min_length:
            msg = f"Must be >= {min_length} chars"
        else:
            msg = f"Must be <= {max_length} chars"
        super().__init__(field_id, msg)
        self.length = length
        self.min_length = min_length
        self.max_length = max_length


class ValueOutOfRange(FormValueError):
    code = "range"

    def __init__(self, field_id: str, value: int, min_value: int | None, max_value: int | None):
        if min_value is not None and value < min_value:
            msg = f"Must be >= {min_value}"
        else:
            msg = f"Must be <= {max_value}"
        super().__init__(field_id, msg)
        self.value = value
        self.min_value = min_value
        self.max_value = max_value


class InvalidNumericInput(FormValueError):
    code = "type"

    def __init__(self, field_id: str | None, raw: Any):
        super().__init__(field_id, "Must be a whole number")
        self.raw = raw


class InvalidDateInput(FormValueError):
    code = "type"

    def __init__(self, field_id: str | None, raw: Any, expected: str):
        super().__init__(field_id, f"Must be {expected}")
        self.raw = raw


class UnexpectedValueShape(FormValueError):
    code = "shape"

    def __init__(self, field_id: str | None, raw: Any, expected: str):
        super().__init__(field_id, f"Expected {expected}, got {type(raw).__name__}")
        self.raw = raw


class InvalidChoice(FormValueError):
    code = "choice"

    def __init__(self, field_id: str, choice: str):
        super().__init__(field_id, f"'{choice}' is not one of the allowed choices")
        self.choice = choice


# schema errors


class UnknownFieldType(FormValueError):
    code = "unknown_type"

    def __init__(self, field_type: Any, field_id: str | None = None):
        super().__init__(field_id, f"Unknown field type: {field_type!r}")
        self.field_type = field_type


class UnknownFieldReference(FormValueError):
    code = "unknown_key"

    def __init__(self, field_id: str):
        super().__init__(field_id, "Not in form")


class FieldTypeMismatch(FormValueError):
    code = "type_mismatch"

    def __init__(self, field_id: str, expected_tag: str, got_tag: str):
        super().__init__(field_id, f"Expected a '{expected_tag}' value, got '{got_tag}'")
        self.expected_tag = expected_tag
        self.got_tag = got_tag


class InvalidRuleBounds(FormValueError):
    code = "rule_bounds"

    def __init__(self, field_id: str, lower: str, upper: str):
        super().__init__(field_id, f"{lower} must not exceed {upper}")
        self.lower = lower
        self.upper = upper


class DuplicateFieldId(FormValueError):
    code = "duplicate_key"

    def __init__(self, field_id: str):
        super().__init__(field_id, "Field id used more than once")


class FormValidationFailed(ValueError):
    """Raised when one or more fields of a form fail; carries every error."""

    def __init__(self, errors: list[FormValueError], message: str = "Submission validation failed"):
        super().__init__(message)
        self.message = message
        self.errors = list(errors)

    def to_detail(self) -> dict[str, Any]:
        return {"message": self.message, "errors": [e.to_dict() for e in self.errors]}
