"""Tests for the delimiter scanner."""

import logging

import pytest

from prebind.scanner import (
    Binding,
    BindingMode,
    LiteralArg,
    LiteralPart,
    MethodSignature,
    PropertyArg,
    Scanner,
    parse,
)


@pytest.mark.parametrize(
    "text",
    ["plain text", "a { b } c", "[single] and {single}", "x ] ] y", "ends with {"],
)
def test_text_without_bindings_is_one_literal(text):
    assert parse(text) == [LiteralPart(text)]


def test_empty_text_has_no_parts():
    assert parse("") == []


def test_two_way_binding_between_literals():
    parts = parse("Hello {{name}}!")

    assert parts == [
        LiteralPart("Hello "),
        Binding(
            mode=BindingMode.TWO_WAY,
            target_path="name",
            dependencies=["name"],
        ),
        LiteralPart("!"),
    ]


def test_one_way_binding_trims_whitespace():
    (binding,) = parse("[[  user.name  ]]")

    assert binding.mode is BindingMode.ONE_WAY
    assert binding.target_path == "user.name"
    assert binding.dependencies == ["user.name"]


def test_method_call_with_mixed_args():
    (binding,) = parse("[[compute(a, 'x', 3)]]")

    assert binding.mode is BindingMode.ONE_WAY
    assert binding.target_path is None
    assert binding.signature == MethodSignature(
        method_name="compute",
        args=[
            PropertyArg(name="a"),
            LiteralArg(raw_text="x", value="x"),
            LiteralArg(raw_text="3", value=3),
        ],
        is_static=False,
    )
    assert binding.dependencies == ["a"]


def test_custom_event_binding():
    (binding,) = parse("{{value::input-changed}}")

    assert binding.mode is BindingMode.TWO_WAY
    assert binding.target_path == "value"
    assert binding.custom_event == "input-changed"
    assert binding.dependencies == ["value"]


def test_negated_binding():
    (binding,) = parse("[[!active]]")

    assert binding == Binding(
        mode=BindingMode.ONE_WAY,
        negate=True,
        target_path="active",
        dependencies=["active"],
    )


def test_negated_method_with_leading_whitespace():
    (binding,) = parse("[[ !isEmpty(items) ]]")

    assert binding.negate is True
    assert binding.signature.method_name == "isEmpty"
    assert binding.dependencies == ["items"]


def test_boolean_args_are_literals():
    (binding,) = parse("[[toggle(true, false)]]")

    assert binding.signature.args == [
        LiteralArg(raw_text="true", value=True),
        LiteralArg(raw_text="false", value=False),
    ]


def test_literal_only_call_is_dynamic():
    """A call without property args has nothing to trigger it, so it re-runs."""
    (binding,) = parse("[[format('x', 2)]]")

    assert binding.signature.is_static is True
    assert binding.signature.dynamic_fn is True
    assert binding.dependencies == ["format"]


def test_dynamic_function_adds_method_dependency():
    (binding,) = parse("[[format(value)]]", dynamic_fns={"format"})

    assert binding.signature.is_static is False
    assert binding.signature.dynamic_fn is True
    assert binding.dependencies == ["value", "format"]


def test_non_dynamic_function_has_no_method_dependency():
    (binding,) = parse("[[format(value)]]", dynamic_fns={"other"})

    assert binding.signature.dynamic_fn is False
    assert binding.dependencies == ["value"]


def test_structured_and_wildcard_args():
    (binding,) = parse("[[sum(items.*, user.age, count)]]")

    assert binding.signature.args == [
        PropertyArg(name="items", structured=True, wildcard=True),
        PropertyArg(name="user.age", structured=True),
        PropertyArg(name="count"),
    ]
    assert binding.dependencies == ["items.*", "user.age", "count"]


def test_string_args_unescape_and_replace_comma_entity():
    (binding,) = parse(r"""[[join("a&comma;b", 'it\'s', "x,y")]]""")

    values = [arg.value for arg in binding.signature.args]
    assert values == ["a,b", "it's", "x,y"]


def test_number_args():
    (binding,) = parse("[[scale(-2, 1.5, 10)]]")

    assert [arg.value for arg in binding.signature.args] == [-2, 1.5, 10]
    assert all(isinstance(arg, LiteralArg) for arg in binding.signature.args)


def test_digit_prefixed_name_becomes_property():
    (binding,) = parse("[[pick(1st)]]")

    assert binding.signature.args == [PropertyArg(name="1st")]
    assert binding.signature.is_static is False


def test_empty_arg_list():
    (binding,) = parse("[[now()]]")

    assert binding.signature.args == []
    assert binding.signature.dynamic_fn is True


def test_whitespace_between_closers_is_allowed():
    (binding,) = parse("[[now() ] ]")

    assert binding.signature.method_name == "now"


def test_compound_binding():
    parts = parse("Hi [[first]] {{last}}.")

    assert [type(part) for part in parts] == [
        LiteralPart,
        Binding,
        LiteralPart,
        Binding,
        LiteralPart,
    ]
    assert parts[2] == LiteralPart(" ")
    assert parts[3].mode is BindingMode.TWO_WAY


def test_adjacent_bindings_have_no_empty_literal():
    parts = parse("[[a]][[b]]")

    assert [part.target_path for part in parts] == ["a", "b"]


def test_mismatched_opener_is_rescanned():
    parts = parse("[{{x}}")

    assert parts == [
        LiteralPart("["),
        Binding(mode=BindingMode.TWO_WAY, target_path="x", dependencies=["x"]),
    ]


def test_quoted_closer_in_body_does_not_close():
    (binding,) = parse("{{label('}}')}}")

    assert binding.signature.args == [LiteralArg(raw_text="}}", value="}}")]


def test_unterminated_binding_falls_back_to_literal(caplog):
    with caplog.at_level(logging.WARNING, logger="prebind"):
        result = Scanner().scan("{{foo")

    assert result.parts == [LiteralPart("{{foo")]
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].message == "Unterminated binding"
    assert "Unterminated binding" in caplog.text


def test_missing_second_closer_resumes_scanning():
    result = Scanner().scan("[[f(a)x [[b]]")

    assert result.diagnostics[0].message == 'Expected two closing "]"'
    assert result.parts == [
        LiteralPart("[[f(a)x "),
        Binding(mode=BindingMode.ONE_WAY, target_path="b", dependencies=["b"]),
    ]


def test_empty_binding_is_diagnosed():
    result = Scanner().scan("a {{ }} b")

    assert result.parts == [LiteralPart("a {{ }} b")]
    assert result.diagnostics[0].message == "Empty binding expression"
    assert not result.has_bindings


def test_missing_method_name_is_diagnosed():
    result = Scanner().scan("[[(a)]]")

    assert result.parts == [LiteralPart("[[(a)]]")]
    assert result.diagnostics[0].message == "Missing method name"


@pytest.mark.parametrize(
    "text", ["{{", "[[f(", "[[f('x", "[[f(a)]", "{{a::b}", "{{a:", "[[!"]
)
def test_truncated_input_never_raises(text):
    result = Scanner().scan(text)

    assert result.parts == [LiteralPart(text)]
    assert result.diagnostics
