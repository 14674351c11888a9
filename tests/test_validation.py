import pytest

from taskforms.core import validation
from taskforms.core.errors import (
    InvalidChoice,
    LengthOutOfRange,
    MissingRequiredField,
    ValueOutOfRange,
)
from taskforms.core.field_values import (
    MultipleChoicesValue,
    NumberValue,
    SingleChoiceValue,
    TextValue,
)
from taskforms.schemas.forms import FormFieldSpec


def make_field(field_type="singleLine", **extra) -> FormFieldSpec:
    return FormFieldSpec.model_validate({"id": "f", "fieldLabel": "F", "fieldType": field_type, **extra})


@pytest.mark.parametrize("value", [None, TextValue(text=""), TextValue(text="   "), MultipleChoicesValue(multiple_choices=[])])
def test_required_rejects_absent_or_empty(value):
    field = make_field(validations={"required": True})
    errors = validation.evaluate(field, value)
    assert len(errors) == 1
    assert isinstance(errors[0], MissingRequiredField)
    assert errors[0].to_dict() == {"field": "f", "code": "required", "message": "Required"}


@pytest.mark.parametrize("text, ok", [("a", False), ("ab", True), ("abcde", True), ("abcdef", False)])
def test_length_bounds_are_inclusive(text, ok):
    field = make_field(validations={"minLength": 2, "maxLength": 5})
    errors = validation.evaluate(field, TextValue(text=text))
    if ok:
        assert errors == []
    else:
        assert [type(e) for e in errors] == [LengthOutOfRange]


def test_length_applies_to_single_choice():
    field = make_field("dropdown", validations={"maxLength": 2})
    errors = validation.evaluate(field, SingleChoiceValue(single_choice="long"))
    assert errors[0].code == "length"


@pytest.mark.parametrize("n, ok", [(0, False), (1, True), (10, True), (11, False)])
def test_number_range(n, ok):
    field = make_field("number", validations={"minValue": 1, "maxValue": 10})
    errors = validation.evaluate(field, NumberValue(number=n))
    assert (errors == []) is ok
    if not ok:
        assert isinstance(errors[0], ValueOutOfRange)


def test_no_rules_accepts_anything_including_absence():
    field = make_field()
    assert validation.evaluate(field, None) == []
    assert validation.evaluate(field, TextValue(text="x" * 1000)) == []


def test_explicit_options_restrict_choices():
    field = make_field(
        "multiSelect",
        options=[{"value": "a", "fieldLabel": "A"}, {"value": "b", "fieldLabel": "B"}],
    )
    assert validation.evaluate(field, MultipleChoicesValue(multiple_choices=["a", "b"])) == []

    errors = validation.evaluate(field, MultipleChoicesValue(multiple_choices=["a", "z"]))
    assert len(errors) == 1
    assert isinstance(errors[0], InvalidChoice)
    assert errors[0].choice == "z"


def test_check_raises_first_error():
    field = make_field(validations={"required": True})
    with pytest.raises(MissingRequiredField):
        validation.check(field, None)
    validation.check(field, TextValue(text="ok"))
