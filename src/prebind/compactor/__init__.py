"""Prebind Compactor - canonical, minimal effect metadata and its text form."""

from prebind.compactor.cache import CacheContext
from prebind.compactor.compactor import CompactedPrototype, Compactor
from prebind.compactor.functions import FunctionRegistry
from prebind.compactor.loader import Loader, loads
from prebind.compactor.renderer import Serializer
from prebind.compactor.spec import (
    OBSERVER_ARG_CACHE,
    CodeLiteral,
    EffectFunction,
    EffectKind,
    Fragment,
    FunctionRef,
)

__all__ = [
    "CacheContext",
    "CompactedPrototype",
    "Compactor",
    "FunctionRegistry",
    "Loader",
    "loads",
    "Serializer",
    "OBSERVER_ARG_CACHE",
    "CodeLiteral",
    "EffectFunction",
    "EffectKind",
    "Fragment",
    "FunctionRef",
]
