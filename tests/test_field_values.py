import base64

import pytest
from pydantic import ValidationError

from taskforms.core.field_values import (
    DateTimeValue,
    FileBlob,
    FileValue,
    MultipleChoicesValue,
    NumberValue,
    SingleChoiceValue,
    TextValue,
    UnsupportedValue,
    dump_field_value,
    parse_field_value,
)
from taskforms.schemas.submissions import FieldEntry


def test_parse_single_key_objects():
    assert parse_field_value({"text": "hi"}) == TextValue(text="hi")
    assert parse_field_value({"number": 42}) == NumberValue(number=42)
    assert parse_field_value({"dateTime": 5}) == DateTimeValue(date_time=5)
    assert parse_field_value({"singleChoice": "a"}) == SingleChoiceValue(single_choice="a")
    assert parse_field_value({"multipleChoices": ["a", "b"]}) == MultipleChoicesValue(multiple_choices=["a", "b"])


def test_dump_uses_wire_tags():
    assert dump_field_value(NumberValue(number=42)) == {"number": 42}
    assert dump_field_value(DateTimeValue(date_time=7)) == {"dateTime": 7}
    assert dump_field_value(MultipleChoicesValue(multiple_choices=["x"])) == {"multipleChoices": ["x"]}


def test_payload_is_the_populated_variant():
    assert NumberValue(number=3).payload == 3
    assert SingleChoiceValue(single_choice="eu").payload == "eu"


def test_unknown_tag_becomes_unsupported_marker():
    v = parse_field_value({"rating": 4})
    assert isinstance(v, UnsupportedValue)
    assert v.kind == "rating"
    assert v.raw == 4
    assert v.payload is v
    # passed through unchanged
    assert dump_field_value(v) == {"rating": 4}


@pytest.mark.parametrize("raw", [{}, {"text": "a", "number": 1}, "text", 42])
def test_zero_or_many_keys_are_invalid(raw):
    with pytest.raises(ValidationError):
        parse_field_value(raw)


@pytest.mark.parametrize("raw", [{"number": "42"}, {"number": True}, {"text": 5}])
def test_payloads_are_strict(raw):
    with pytest.raises(ValidationError):
        parse_field_value(raw)


def test_file_blob_from_base64_fills_size():
    encoded = base64.b64encode(b"hello").decode()
    v = parse_field_value({"file": {"fileName": "a.txt", "fileType": "text/plain", "bytes": encoded}})

    assert isinstance(v, FileValue)
    assert v.file.data == b"hello"
    assert v.file.file_size == 5
    assert dump_field_value(v)["file"]["bytes"] == encoded


def test_file_blob_accepts_list_of_byte_ints():
    blob = FileBlob.model_validate({"fileName": "b.bin", "bytes": [0, 1, 2]})
    assert blob.data == b"\x00\x01\x02"
    assert blob.file_type == "application/octet-stream"


def test_field_entry_wire_shape():
    entry = FieldEntry.model_validate({"fieldId": "age", "value": {"number": 42}})
    assert entry.value == NumberValue(number=42)
    assert entry.model_dump(mode="json", by_alias=True) == {"fieldId": "age", "value": {"number": 42}}
