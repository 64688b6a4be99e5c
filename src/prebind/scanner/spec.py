"""Binding descriptor model - the output of the delimiter scanner."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

import msgspec

from prebind.exceptions import BindingInvariantError


class BindingMode(str, Enum):
    """Binding direction, named by its opening delimiter character."""

    ONE_WAY = "["
    TWO_WAY = "{"

    @property
    def closer(self) -> str:
        return "]" if self is BindingMode.ONE_WAY else "}"


class LiteralArg(msgspec.Struct, rename={"raw_text": "name"}):
    """A literal method argument: string, number or boolean."""

    raw_text: str
    value: Union[str, int, float, bool]

    def to_wire(self) -> Dict[str, Any]:
        wire = msgspec.to_builtins(self)
        wire["literal"] = True
        return wire


class PropertyArg(msgspec.Struct, omit_defaults=True):
    """A property or path argument read from the host's data."""

    name: str
    structured: bool = False
    wildcard: bool = False

    def to_wire(self) -> Dict[str, Any]:
        return msgspec.to_builtins(self)


Arg = Union[LiteralArg, PropertyArg]


class MethodSignature(msgspec.Struct):
    """A method-call binding such as `compute(a, 'x', 3)`."""

    method_name: str
    args: List[Arg] = []
    is_static: bool = True
    dynamic_fn: bool = False

    def to_wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {
            "methodName": self.method_name,
            "args": [arg.to_wire() for arg in self.args],
            "static": self.is_static,
        }
        if self.dynamic_fn:
            wire["dynamicFn"] = True
        return wire


class LiteralPart(msgspec.Struct):
    """Verbatim text between bindings."""

    text: str

    def to_wire(self) -> Dict[str, Any]:
        return {"literal": self.text}


class Binding(msgspec.Struct):
    """A `[[...]]` or `{{...}}` binding.

    Exactly one of `target_path` (plain property/path binding) or `signature`
    (method-call binding) is set.
    """

    mode: BindingMode
    target_path: Optional[str] = None
    signature: Optional[MethodSignature] = None
    negate: bool = False
    custom_event: Optional[str] = None
    dependencies: List[str] = []

    def __post_init__(self) -> None:
        if self.signature is not None and self.target_path is not None:
            raise BindingInvariantError(
                "Binding cannot have both a target path and a method signature",
                target_path=self.target_path,
            )
        if self.signature is None and not self.target_path:
            raise BindingInvariantError(
                "Binding needs either a target path or a method signature"
            )

    def to_wire(self) -> Dict[str, Any]:
        """Shape consumed by the runtime's template processing."""
        wire: Dict[str, Any] = {"mode": self.mode.value}
        if self.signature is not None:
            wire["signature"] = self.signature.to_wire()
        else:
            wire["source"] = self.target_path
        if self.negate:
            wire["negate"] = True
        if self.custom_event is not None:
            wire["customEvent"] = True
            wire["event"] = self.custom_event
        wire["dependencies"] = list(self.dependencies)
        return wire


BindingPart = Union[LiteralPart, Binding]


class Diagnostic(msgspec.Struct, frozen=True):
    """A recoverable problem found while scanning one text fragment."""

    fragment: str
    position: int
    message: str


class ScanResult(msgspec.Struct):
    parts: List[BindingPart] = []
    diagnostics: List[Diagnostic] = []

    @property
    def has_bindings(self) -> bool:
        return any(isinstance(part, Binding) for part in self.parts)


def to_wire(parts: List[BindingPart]) -> List[Dict[str, Any]]:
    """Convert scanner output to the plain mappings the runtime expects."""
    return [part.to_wire() for part in parts]
