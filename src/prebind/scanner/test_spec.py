from prebind.exceptions import BindingInvariantError
from prebind.scanner import (
    Binding,
    BindingMode,
    LiteralArg,
    LiteralPart,
    MethodSignature,
    PropertyArg,
    parse,
    to_wire,
)
import pytest


def test_binding_requires_target_or_signature():
    with pytest.raises(BindingInvariantError):
        Binding(mode=BindingMode.ONE_WAY)


def test_binding_rejects_target_and_signature():
    with pytest.raises(BindingInvariantError) as exc_info:
        Binding(
            mode=BindingMode.ONE_WAY,
            target_path="a",
            signature=MethodSignature(method_name="f"),
        )
    assert exc_info.value.target_path == "a"


def test_mode_closer():
    assert BindingMode.ONE_WAY.closer == "]"
    assert BindingMode.TWO_WAY.closer == "}"


def test_literal_wire_form():
    assert LiteralPart("abc").to_wire() == {"literal": "abc"}


def test_property_binding_wire_form_omits_defaults():
    (binding,) = parse("{{value::changed}}")

    assert binding.to_wire() == {
        "mode": "{",
        "source": "value",
        "customEvent": True,
        "event": "changed",
        "dependencies": ["value"],
    }


def test_method_binding_wire_form():
    parts = parse("x [[!f(a.*, 'q', true)]]")

    assert to_wire(parts) == [
        {"literal": "x "},
        {
            "mode": "[",
            "signature": {
                "methodName": "f",
                "args": [
                    {"name": "a", "structured": True, "wildcard": True},
                    {"name": "q", "value": "q", "literal": True},
                    {"name": "true", "value": True, "literal": True},
                ],
                "static": False,
            },
            "negate": True,
            "dependencies": ["a.*"],
        },
    ]


def test_arg_wire_forms():
    assert PropertyArg(name="x").to_wire() == {"name": "x"}
    assert LiteralArg(raw_text="1", value=1).to_wire() == {
        "name": "1",
        "value": 1,
        "literal": True,
    }
