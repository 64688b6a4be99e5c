"""prebind - build-time precomputation of template binding metadata.

Scans binding expressions out of template text, and compacts the effect
metadata computed by the component runtime into minimal loadable text.
"""

from prebind.compactor import (
    CacheContext,
    CompactedPrototype,
    Compactor,
    EffectFunction,
    EffectKind,
    Fragment,
    FunctionRef,
    FunctionRegistry,
    Serializer,
    loads,
)
from prebind.config import PrebindConfig
from prebind.exceptions import PrebindError
from prebind.log import setup_logging
from prebind.scanner import Scanner, parse

__version__ = "0.1.0"

__all__ = [
    "CacheContext",
    "CompactedPrototype",
    "Compactor",
    "EffectFunction",
    "EffectKind",
    "Fragment",
    "FunctionRef",
    "FunctionRegistry",
    "Serializer",
    "loads",
    "PrebindConfig",
    "PrebindError",
    "Scanner",
    "parse",
    "setup_logging",
]
