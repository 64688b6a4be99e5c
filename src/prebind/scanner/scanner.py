"""Delimiter scanner - splits a text fragment into literals and bindings.

The scanner is a single left-to-right pass over the characters of one
attribute value or text node. It keeps one binding-in-progress record and a
`State`; each state has a handler in a dispatch table. A handler returns
False when the current character must be examined again in the state it
switched to.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, Iterable, List, Optional

from prebind.config import PrebindConfig
from prebind.scanner.spec import (
    Arg,
    Binding,
    BindingMode,
    BindingPart,
    Diagnostic,
    LiteralArg,
    LiteralPart,
    MethodSignature,
    PropertyArg,
    ScanResult,
)

log = logging.getLogger(__name__)

OPENERS: Dict[str, BindingMode] = {mode.value: mode for mode in BindingMode}
QUOTES = ("'", '"')
PATH_SEPARATOR = "."
WILDCARD_SUFFIX = ".*"
COMMA_ENTITY = "&comma;"

_ESCAPED_CHAR = re.compile(r"\\(.)", re.DOTALL)


class State(Enum):
    INITIAL = auto()
    CONFIRM_OPEN = auto()
    SKIP_LEADING_WS = auto()
    BODY = auto()
    STRING = auto()
    CONFIRM_COLON = auto()
    EVENT_BODY = auto()
    CONFIRM_EVENT_CLOSE = auto()
    CONFIRM_CLOSE = auto()
    METHOD_ARGS = auto()
    STRING_ARG = auto()
    NUMBER_ARG = auto()
    VARIABLE_ARG = auto()
    AWAIT_CLOSE_1 = auto()
    AWAIT_CLOSE_2 = auto()


@dataclass
class _Draft:
    """The binding currently being scanned."""

    mode: BindingMode
    opener_at: int
    start: int = 0  # first character of the pending expression or argument
    negate: bool = False
    event_at: int = -1  # first character after `::`
    method_name: Optional[str] = None
    args: List[Arg] = field(default_factory=list)
    is_static: bool = True
    dynamic_fn: bool = False
    dependencies: List[str] = field(default_factory=list)

    def depend(self, name: str) -> None:
        if name not in self.dependencies:
            self.dependencies.append(name)


class _Scan:
    """State for scanning a single fragment."""

    def __init__(self, text: str, dynamic_fns: frozenset):
        self.text = text
        self.dynamic_fns = dynamic_fns
        self.parts: List[BindingPart] = []
        self.diagnostics: List[Diagnostic] = []
        self.state = State.INITIAL
        self.draft: Optional[_Draft] = None
        self.literal_start = 0
        self.quote = ""
        self.escaped = False

        self.handlers: Dict[State, Callable[[int, str], bool]] = {
            State.INITIAL: self._initial,
            State.CONFIRM_OPEN: self._confirm_open,
            State.SKIP_LEADING_WS: self._skip_leading_ws,
            State.BODY: self._body,
            State.STRING: self._string,
            State.CONFIRM_COLON: self._confirm_colon,
            State.EVENT_BODY: self._event_body,
            State.CONFIRM_EVENT_CLOSE: self._confirm_event_close,
            State.CONFIRM_CLOSE: self._confirm_close,
            State.METHOD_ARGS: self._method_args,
            State.STRING_ARG: self._string_arg,
            State.NUMBER_ARG: self._number_arg,
            State.VARIABLE_ARG: self._variable_arg,
            State.AWAIT_CLOSE_1: self._await_close_1,
            State.AWAIT_CLOSE_2: self._await_close_2,
        }

    def run(self) -> ScanResult:
        text = self.text
        i = 0
        while i < len(text):
            if self.handlers[self.state](i, text[i]):
                i += 1

        if self.state not in (State.INITIAL, State.CONFIRM_OPEN):
            self._fail(len(text), "Unterminated binding")

        self._flush_literal(len(text))
        return ScanResult(parts=self.parts, diagnostics=self.diagnostics)

    # -- bookkeeping -------------------------------------------------------

    @property
    def closer(self) -> str:
        assert self.draft is not None
        return self.draft.mode.closer

    def _flush_literal(self, end: int) -> None:
        literal = self.text[self.literal_start : end]
        if literal:
            self.parts.append(LiteralPart(literal))

    def _push(self, binding: Binding, end: int) -> None:
        assert self.draft is not None
        self._flush_literal(self.draft.opener_at)
        self.parts.append(binding)
        self.literal_start = end
        self.draft = None
        self.state = State.INITIAL

    def _fail(self, position: int, message: str) -> None:
        """Abandon the current binding; its text becomes literal text."""
        self.diagnostics.append(
            Diagnostic(fragment=self.text, position=position, message=message)
        )
        log.warning('%s at offset %d in binding "%s"', message, position, self.text)
        self.draft = None
        self.state = State.INITIAL

    def _open_quote(self, char: str) -> None:
        self.quote = char
        self.escaped = False

    def _quote_closed(self, char: str) -> bool:
        if self.escaped:
            self.escaped = False
        elif char == "\\":
            self.escaped = True
        elif char == self.quote:
            return True
        return False

    def _emit_property(self, i: int, source: str, event: Optional[str]) -> None:
        draft = self.draft
        assert draft is not None
        if not source:
            self._fail(i, "Empty binding expression")
            return
        draft.depend(source)
        binding = Binding(
            mode=draft.mode,
            target_path=source,
            negate=draft.negate,
            custom_event=event or None,
            dependencies=draft.dependencies,
        )
        self._push(binding, i + 1)

    def _emit_method(self, i: int) -> None:
        draft = self.draft
        assert draft is not None and draft.method_name is not None
        signature = MethodSignature(
            method_name=draft.method_name,
            args=draft.args,
            is_static=draft.is_static,
            dynamic_fn=draft.dynamic_fn,
        )
        binding = Binding(
            mode=draft.mode,
            signature=signature,
            negate=draft.negate,
            dependencies=draft.dependencies,
        )
        self._push(binding, i + 1)

    # -- method arguments --------------------------------------------------

    def _store_variable(self, i: int) -> None:
        draft = self.draft
        assert draft is not None
        name = self.text[draft.start : i].strip()
        if not name:
            return
        if name in ("true", "false"):
            draft.args.append(LiteralArg(raw_text=name, value=name == "true"))
            return

        structured = PATH_SEPARATOR in name
        wildcard = structured and name.endswith(WILDCARD_SUFFIX)
        stored = name[: -len(WILDCARD_SUFFIX)] if wildcard else name
        draft.args.append(
            PropertyArg(name=stored, structured=structured, wildcard=wildcard)
        )
        draft.depend(name)
        draft.is_static = False

    def _store_number(self, i: int) -> None:
        draft = self.draft
        assert draft is not None
        raw = self.text[draft.start : i].strip()
        try:
            value: float = int(raw)
        except ValueError:
            try:
                value = float(raw)
            except ValueError:
                # `-foo`, `1.2.3` and friends are property names after all
                self._store_variable(i)
                return
        draft.args.append(LiteralArg(raw_text=raw, value=value))

    def _store_string(self, i: int) -> None:
        draft = self.draft
        assert draft is not None
        value = self.text[draft.start : i].lstrip()[1:]
        value = value.replace(COMMA_ENTITY, ",")
        value = _ESCAPED_CHAR.sub(r"\1", value)
        draft.args.append(LiteralArg(raw_text=value, value=value))

    def _close_method(self, i: int) -> None:
        draft = self.draft
        assert draft is not None and draft.method_name is not None
        draft.start = i + 1
        if draft.is_static or draft.method_name in self.dynamic_fns:
            draft.dynamic_fn = True
            draft.depend(draft.method_name)
        self.state = State.AWAIT_CLOSE_1

    # -- state handlers ----------------------------------------------------

    def _initial(self, i: int, char: str) -> bool:
        if char in OPENERS:
            self.draft = _Draft(mode=OPENERS[char], opener_at=i)
            self.state = State.CONFIRM_OPEN
        return True

    def _confirm_open(self, i: int, char: str) -> bool:
        assert self.draft is not None
        if char == self.draft.mode.value:
            self.draft.start = i + 1
            self.state = State.SKIP_LEADING_WS
            return True
        self.draft = None
        self.state = State.INITIAL
        return False

    def _skip_leading_ws(self, i: int, char: str) -> bool:
        assert self.draft is not None
        if char.isspace():
            return True
        self.state = State.BODY
        if char == "!":
            self.draft.negate = True
            self.draft.start = i + 1
            return True
        return False

    def _body(self, i: int, char: str) -> bool:
        draft = self.draft
        assert draft is not None
        if char == draft.mode.closer:
            self.state = State.CONFIRM_CLOSE
        elif char in QUOTES:
            self._open_quote(char)
            self.state = State.STRING
        elif char == "(":
            method_name = self.text[draft.start : i].strip()
            if not method_name:
                self._fail(i, "Missing method name")
                return True
            draft.method_name = method_name
            draft.start = i + 1
            self.state = State.METHOD_ARGS
        elif char == ":":
            self.state = State.CONFIRM_COLON
        return True

    def _string(self, i: int, char: str) -> bool:
        if self._quote_closed(char):
            self.state = State.BODY
        return True

    def _confirm_colon(self, i: int, char: str) -> bool:
        assert self.draft is not None
        if char == ":":
            self.draft.event_at = i + 1
            self.state = State.EVENT_BODY
            return True
        self.state = State.BODY
        return False

    def _event_body(self, i: int, char: str) -> bool:
        if char == self.closer:
            self.state = State.CONFIRM_EVENT_CLOSE
        return True

    def _confirm_event_close(self, i: int, char: str) -> bool:
        draft = self.draft
        assert draft is not None
        if char == draft.mode.closer:
            event = self.text[draft.event_at : i - 1].strip()
            source = self.text[draft.start : draft.event_at - 2].strip()
            self._emit_property(i, source, event)
            return True
        self.state = State.EVENT_BODY
        return False

    def _confirm_close(self, i: int, char: str) -> bool:
        draft = self.draft
        assert draft is not None
        if char == draft.mode.closer:
            self._emit_property(i, self.text[draft.start : i - 1].strip(), None)
            return True
        self.state = State.BODY
        return False

    def _method_args(self, i: int, char: str) -> bool:
        draft = self.draft
        assert draft is not None
        if char == ")":
            self._store_variable(i)
            self._close_method(i)
        elif char == ",":
            self._store_variable(i)
            draft.start = i + 1
        elif char in QUOTES:
            self._open_quote(char)
            self.state = State.STRING_ARG
        elif "0" <= char <= "9" or char == "-":
            self.state = State.NUMBER_ARG
        elif not char.isspace():
            self.state = State.VARIABLE_ARG
        return True

    def _string_arg(self, i: int, char: str) -> bool:
        assert self.draft is not None
        if self._quote_closed(char):
            self._store_string(i)
            self.draft.start = i + 1
            self.state = State.METHOD_ARGS
        return True

    def _number_arg(self, i: int, char: str) -> bool:
        assert self.draft is not None
        if char == ",":
            self._store_number(i)
            self.draft.start = i + 1
            self.state = State.METHOD_ARGS
        elif char == ")":
            self._store_number(i)
            self._close_method(i)
        elif not ("0" <= char <= "9" or char == "." or char.isspace()):
            self.state = State.VARIABLE_ARG
        return True

    def _variable_arg(self, i: int, char: str) -> bool:
        assert self.draft is not None
        if char == ",":
            self._store_variable(i)
            self.draft.start = i + 1
            self.state = State.METHOD_ARGS
        elif char == ")":
            self._store_variable(i)
            self._close_method(i)
        return True

    def _await_close_1(self, i: int, char: str) -> bool:
        if char == self.closer:
            self.state = State.AWAIT_CLOSE_2
            return True
        if char.isspace():
            return True
        self._fail(i, f'Expected two closing "{self.closer}"')
        return False

    def _await_close_2(self, i: int, char: str) -> bool:
        if char == self.closer:
            self._emit_method(i)
            return True
        if char.isspace():
            return True
        self._fail(i, f'Expected one closing "{self.closer}"')
        return False


class Scanner:
    """Parses the binding syntax out of attribute values and text nodes.

    Args:
        dynamic_fns: Method names that must be re-evaluated on every change
            at this scope (the runtime's `dynamicFns`).
    """

    def __init__(self, dynamic_fns: Optional[Iterable[str]] = None):
        self.dynamic_fns = frozenset(dynamic_fns or ())

    @classmethod
    def from_config(cls, config: PrebindConfig) -> "Scanner":
        return cls(config.dynamic_fns)

    def scan(self, text: str) -> ScanResult:
        """Scan one fragment, collecting diagnostics instead of raising."""
        return _Scan(text, self.dynamic_fns).run()


def parse(
    text: str, dynamic_fns: Optional[Iterable[str]] = None
) -> List[BindingPart]:
    """Parse `text` into literal and binding parts."""
    return Scanner(dynamic_fns).scan(text).parts
