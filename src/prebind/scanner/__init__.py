"""Prebind Scanner - parses binding expressions out of template text."""

from prebind.scanner.scanner import Scanner, State, parse
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
    to_wire,
)

__all__ = [
    "Scanner",
    "State",
    "parse",
    "Arg",
    "Binding",
    "BindingMode",
    "BindingPart",
    "Diagnostic",
    "LiteralArg",
    "LiteralPart",
    "MethodSignature",
    "PropertyArg",
    "ScanResult",
    "to_wire",
]
