from __future__ import annotations

from enum import Enum

from taskforms.core.errors import UnknownFieldType


class FieldType(str, Enum):
    """
    Closed vocabulary of form field kinds.

    The numeric member is named ``number_`` so it never shadows the builtin,
    but its wire and display value is plain ``"number"``.
    """

    single_line = "singleLine"
    multi_line = "multiLine"
    number_ = "number"
    date = "date"
    date_time = "dateTime"
    dropdown = "dropdown"
    multi_select = "multiSelect"
    file_upload = "fileUpload"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def from_label(cls, raw) -> "FieldType":
        """
        Accepts any of:
          FieldType.number_       (already canonical)
          "number"                (wire value)
          "number_"               (member name)
          "Number", "Single line" (display label, case-insensitive)
        """
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            raise UnknownFieldType(raw)

        s = raw.strip()
        try:
            return cls(s)
        except ValueError:
            pass

        if s in cls.__members__:
            return cls.__members__[s]

        found = _BY_LABEL.get(s.lower())
        if found is None:
            raise UnknownFieldType(raw)
        return found


_LABELS: dict[FieldType, str] = {
    FieldType.single_line: "Single line",
    FieldType.multi_line: "Multi line",
    FieldType.number_: "Number",
    FieldType.date: "Date",
    FieldType.date_time: "Date & time",
    FieldType.dropdown: "Dropdown",
    FieldType.multi_select: "Multi select",
    FieldType.file_upload: "File upload",
}

_BY_LABEL: dict[str, FieldType] = {label.lower(): ft for ft, label in _LABELS.items()}

# FieldValue tag produced by each kind
_VALUE_TAGS: dict[FieldType, str] = {
    FieldType.single_line: "text",
    FieldType.multi_line: "text",
    FieldType.number_: "number",
    FieldType.date: "date",
    FieldType.date_time: "dateTime",
    FieldType.dropdown: "singleChoice",
    FieldType.multi_select: "multipleChoices",
    FieldType.file_upload: "file",
}

_TEXT_RULES = frozenset({"required", "min_length", "max_length"})
_NUMBER_RULES = frozenset({"required", "min_value", "max_value"})
_REQUIRED_ONLY = frozenset({"required"})

_APPLICABLE_RULES: dict[FieldType, frozenset[str]] = {
    FieldType.single_line: _TEXT_RULES,
    FieldType.multi_line: _TEXT_RULES,
    FieldType.number_: _NUMBER_RULES,
    FieldType.date: _REQUIRED_ONLY,
    FieldType.date_time: _REQUIRED_ONLY,
    FieldType.dropdown: _TEXT_RULES,
    FieldType.multi_select: _REQUIRED_ONLY,
    FieldType.file_upload: _REQUIRED_ONLY,
}


def field_type_to_string(field_type) -> str:
    """Display string for a field type; ``number_`` renders as ``"number"``."""
    return FieldType.from_label(field_type).value


def value_tag(field_type) -> str:
    return _VALUE_TAGS[FieldType.from_label(field_type)]


def applicable_rules(field_type) -> frozenset[str]:
    return _APPLICABLE_RULES[FieldType.from_label(field_type)]


def is_choice(field_type) -> bool:
    return FieldType.from_label(field_type) in (FieldType.dropdown, FieldType.multi_select)
