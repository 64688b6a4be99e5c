"""Registry of runtime effect functions and their symbolic names."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

from prebind.compactor.spec import EffectFunction, FunctionRef
from prebind.exceptions import UnknownFunctionError


class FunctionRegistry:
    """Maps effect function objects to the names they are exported under.

    Effect records that already carry an `EffectFunction` member (or a
    `FunctionRef`) resolve without a lookup. Raw callables handed back by the
    runtime are matched by identity against the registered implementations.
    """

    def __init__(self, functions: Optional[Mapping[str, Callable[..., Any]]] = None):
        self._functions: Dict[str, Callable[..., Any]] = {}
        for name, fn in (functions or {}).items():
            self.register(name, fn)

    @classmethod
    def from_effect_functions(
        cls, implementations: Mapping[EffectFunction, Callable[..., Any]]
    ) -> "FunctionRegistry":
        return cls({kind.value: fn for kind, fn in implementations.items()})

    def register(self, name: str | EffectFunction, fn: Callable[..., Any]) -> None:
        if isinstance(name, EffectFunction):
            name = name.value
        self._functions[name] = fn

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def callables(self) -> List[Callable[..., Any]]:
        return list(self._functions.values())

    def symbol_for(self, fn: Any) -> Optional[FunctionRef]:
        """Return the symbolic reference for `fn`, or None if it is unknown."""
        if isinstance(fn, FunctionRef):
            return fn
        if isinstance(fn, EffectFunction):
            return FunctionRef(fn.value)
        for name, candidate in self._functions.items():
            if candidate is fn:
                return FunctionRef(name)
        return None

    def resolve(self, ref: FunctionRef) -> Callable[..., Any]:
        """Return the implementation registered for `ref`."""
        try:
            return self._functions[ref.name]
        except KeyError:
            raise UnknownFunctionError(ref.name) from None
