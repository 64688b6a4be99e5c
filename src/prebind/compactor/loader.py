"""Loader - reads serialized metadata back into the canonical value model.

The serializer's output is a script object literal: bare identifier keys,
function references and fragment constructor calls are not JSON. The loader
rewrites those constructs into JSON (code literals become one-key sentinel
objects), decodes with msgspec and then swaps the sentinels for
`FunctionRef` / `Fragment` values.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional, Tuple

import msgspec

from prebind.compactor.spec import Fragment, FunctionRef
from prebind.config import PrebindConfig
from prebind.exceptions import LoadError

_WORD = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*(?:\.[A-Za-z_$][A-Za-z0-9_$]*)*")
_NUMBER = re.compile(r"-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")
_HEX4 = re.compile(r"[0-9a-fA-F]{4}")
_CALL_OPEN = re.compile(r"\s*\(\s*'")
_CALL_CLOSE = re.compile(r"\s*\)")
_COLON = re.compile(r"\s*:")

_FUNCTION_SENTINEL = "\x00fn"
_FRAGMENT_SENTINEL = "\x00fragment"

_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "b": "\b", "f": "\f", "v": "\v"}


class Loader:
    """Reads text produced by `Serializer.dumps`."""

    def __init__(self, config: Optional[PrebindConfig] = None):
        self.config = config or PrebindConfig()
        self._decoder = msgspec.json.Decoder()

    def loads(self, text: str) -> Any:
        json_text = self._to_json(text)
        try:
            value = self._decoder.decode(json_text)
        except msgspec.DecodeError as exc:
            raise LoadError(f"Malformed metadata: {exc}") from exc
        return _restore(value)

    def _to_json(self, text: str) -> str:
        out: List[str] = []
        i = 0
        while i < len(text):
            char = text[i]
            word_match = _WORD.match(text, i)
            if char == '"':
                end = _end_of_string(text, i)
                out.append(text[i:end])
                i = end
            elif char == "-" or "0" <= char <= "9":
                match = _NUMBER.match(text, i)
                if match is None:
                    raise LoadError("Malformed number", i)
                out.append(match.group())
                i = match.end()
            elif word_match:
                replacement, i = self._word(text, word_match.group(), word_match.end(), i)
                out.append(replacement)
            else:
                out.append(char)
                i += 1
        return "".join(out)

    def _word(self, text: str, word: str, i: int, start: int) -> Tuple[str, int]:
        # keys first: `true`, `null` etc. are valid bare keys
        if "." not in word and _COLON.match(text, i):
            return _quoted_key(word), i

        if word in ("true", "false", "null"):
            return word, i

        function_prefix = self.config.function_prefix + "."
        if word.startswith(function_prefix):
            name = word[len(function_prefix) :]
            return _sentinel(_FUNCTION_SENTINEL, name), i

        if word == self.config.fragment_prefix:
            markup, i = _read_call_argument(text, i)
            return _sentinel(_FRAGMENT_SENTINEL, markup), i

        raise LoadError(f"Unexpected identifier '{word}'", start)


def _sentinel(kind: str, payload: str) -> str:
    return msgspec.json.encode({kind: payload}).decode()


def _quoted_key(word: str) -> str:
    return msgspec.json.encode(word).decode()


def _end_of_string(text: str, start: int, quote: str = '"') -> int:
    """Index just past the string literal opening at `start`."""
    i = start + 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == quote:
            return i + 1
        i += 1
    raise LoadError("Unterminated string", start)


def _read_call_argument(text: str, i: int) -> Tuple[str, int]:
    """Read `('...')` at `i` and return the decoded string argument."""
    match = _CALL_OPEN.match(text, i)
    if match is None:
        raise LoadError("Expected a single-quoted call argument", i)
    start = match.end() - 1
    end = _end_of_string(text, start, quote="'")
    close = _CALL_CLOSE.match(text, end)
    if close is None:
        raise LoadError("Expected ')' after call argument", end)
    return _unescape_single_quoted(text[start + 1 : end - 1], start), close.end()


def _unescape_single_quoted(body: str, offset: int) -> str:
    out: List[str] = []
    i = 0
    while i < len(body):
        char = body[i]
        if char != "\\":
            out.append(char)
            i += 1
            continue
        if i + 1 >= len(body):
            raise LoadError("Dangling escape", offset + i)
        escaped = body[i + 1]
        if escaped == "u" and _HEX4.match(body, i + 2):
            out.append(chr(int(body[i + 2 : i + 6], 16)))
            i += 6
            continue
        out.append(_SIMPLE_ESCAPES.get(escaped, escaped))
        i += 2
    return "".join(out)


def _restore(value: Any) -> Any:
    if isinstance(value, dict):
        if len(value) == 1:
            key, payload = next(iter(value.items()))
            if key == _FUNCTION_SENTINEL:
                return FunctionRef(payload)
            if key == _FRAGMENT_SENTINEL:
                return Fragment(payload)
        return {key: _restore(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_restore(item) for item in value]
    return value


def loads(text: str, config: Optional[PrebindConfig] = None) -> Any:
    """Read serialized metadata back into canonical values."""
    return Loader(config).loads(text)
