"""Compactor value model - effect kinds, effect functions and code literals."""

from __future__ import annotations

from enum import Enum

import msgspec

from prebind.config import PrebindConfig


class EffectKind(str, Enum):
    """Effect categories, keyed by the runtime's prototype property name."""

    COMPUTE = "__computeEffects"
    REFLECT = "__reflectEffects"
    NOTIFY = "__notifyEffects"
    PROPAGATE = "__propagateEffects"
    OBSERVE = "__observeEffects"
    READ_ONLY = "__readOnly"

    @property
    def has_records(self) -> bool:
        # __readOnly maps property -> flag, not property -> effect records
        return self is not EffectKind.READ_ONLY


class EffectFunction(str, Enum):
    """Effect functions the runtime exposes on `EFFECT_FUNCTIONS`."""

    RUN_BINDING_EFFECT = "runBindingEffect"
    RUN_OBSERVER_EFFECT = "runObserverEffect"
    RUN_NOTIFY_EFFECT = "runNotifyEffect"
    RUN_REFLECT_EFFECT = "runReflectEffect"
    RUN_METHOD_EFFECT = "runMethodEffect"
    RUN_COMPUTED_EFFECT = "runComputedEffect"


OBSERVER_ARG_CACHE = "__observerArgCache"

# Template info keys
NODE_INFO_LIST = "nodeInfoList"
PROPERTY_EFFECTS = "propertyEffects"
TEMPLATE_INFO = "templateInfo"
CONTENT = "content"
BINDINGS = "bindings"
PARTS = "parts"
DYNAMIC_FNS = "dynamicFns"
STRIP_WHITESPACE = "stripWhiteSpace"

_SINGLE_QUOTED_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "`": "\\`",
    "\n": "\\n",
    "\r": "\\r",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def single_quote(text: str) -> str:
    """Render `text` as a single-quoted script string literal."""
    escaped = "".join(_SINGLE_QUOTED_ESCAPES.get(char, char) for char in text)
    return f"'{escaped}'"


class CodeLiteral(msgspec.Struct, frozen=True):
    """A leaf that is emitted as an expression instead of a quoted string."""

    def render(self, config: PrebindConfig) -> str:
        raise NotImplementedError


class FunctionRef(CodeLiteral, frozen=True):
    """Reference to a named runtime effect function."""

    name: str

    def render(self, config: PrebindConfig) -> str:
        return f"{config.function_prefix}.{self.name}"


class Fragment(CodeLiteral, frozen=True):
    """Nested template markup, rebuilt as a document fragment on load."""

    markup: str

    def render(self, config: PrebindConfig) -> str:
        return f"{config.fragment_prefix}({single_quote(self.markup)})"
