"""Compactor - turns raw runtime effect metadata into its canonical form."""

from __future__ import annotations

import copy
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, List, Mapping, MutableMapping, Optional

from prebind.compactor.cache import CacheContext
from prebind.compactor.functions import FunctionRegistry
from prebind.compactor.spec import (
    BINDINGS,
    CONTENT,
    DYNAMIC_FNS,
    NODE_INFO_LIST,
    OBSERVER_ARG_CACHE,
    PARTS,
    PROPERTY_EFFECTS,
    STRIP_WHITESPACE,
    TEMPLATE_INFO,
    EffectKind,
    Fragment,
)
from prebind.config import PrebindConfig

log = logging.getLogger(__name__)

EffectTable = Dict[str, List[Dict[str, Any]]]

_PATH_FLAGS = ("structured", "wildcard")


def _without(
    mapping: Mapping[str, Any],
    drop: Iterable[str] = (),
    falsy: Iterable[str] = (),
) -> Dict[str, Any]:
    """Copy `mapping` without the `drop` keys and without false `falsy` keys."""
    drop = set(drop)
    falsy = set(falsy)
    return {
        key: value
        for key, value in mapping.items()
        if key not in drop and not (key in falsy and not value)
    }


def _strip_falsy(mapping: MutableMapping[str, Any], keys: Iterable[str]) -> None:
    for key in keys:
        if key in mapping and not mapping[key]:
            del mapping[key]


def _strip_args(args: Any) -> Any:
    if not isinstance(args, list):
        return args
    return [
        _without(arg, falsy=_PATH_FLAGS) if isinstance(arg, Mapping) else arg
        for arg in args
    ]


def _cache_names(value: Any) -> List[str]:
    """Every cache name mentioned in a raw table, in no particular order."""
    names: List[str] = []
    stack = [value]
    while stack:
        item = stack.pop()
        if isinstance(item, Mapping):
            for key, child in item.items():
                if key == "cacheName" and isinstance(child, str):
                    names.append(child)
                elif key == OBSERVER_ARG_CACHE and isinstance(child, Mapping):
                    names.extend(child)
                else:
                    stack.append(child)
        elif isinstance(item, (list, tuple)):
            stack.extend(item)
    return names


@dataclass
class CompactedPrototype:
    """Canonical metadata for one element, ready for serialization."""

    tag_name: str
    bindings: Optional[Dict[str, Any]] = None
    effects: Optional[Dict[str, Any]] = None
    context: CacheContext = field(default_factory=CacheContext)


class Compactor:
    """Strips, symbolizes and remaps effect metadata returned by the runtime.

    The raw input is deep-copied on entry; the copy is compacted in place and
    returned. Compacting the output again with the same `CacheContext` gives
    back an identical structure.
    """

    def __init__(
        self,
        registry: Optional[FunctionRegistry] = None,
        config: Optional[PrebindConfig] = None,
    ):
        self.registry = registry or FunctionRegistry()
        self.config = config or PrebindConfig()

    def compact_prototype(
        self,
        tag_name: str,
        template_info: Optional[Mapping[str, Any]] = None,
        effects: Optional[Mapping[str, Any]] = None,
    ) -> CompactedPrototype:
        """Compact both metadata tables of one element with a shared context.

        Template bindings are processed first so that the observer argument
        cache, patched at the end of `compact_effects`, sees every cache name.
        """
        result = CompactedPrototype(tag_name=tag_name)
        for table in (template_info, effects):
            if table is not None:
                result.context.reserve(_cache_names(table))
        if template_info is not None:
            result.bindings = self.compact_template(template_info, result.context)
        if effects is not None:
            result.effects = self.compact_effects(effects, result.context)

        log.info(
            "Compacted %s (%d cache names aliased)", tag_name, len(result.context)
        )
        return result

    def compact_effects(
        self, raw_effects: Mapping[str, Any], context: Optional[CacheContext] = None
    ) -> Dict[str, Any]:
        """Compact a prototype's effect tables and its observer argument cache.

        Args:
            raw_effects: Mapping of effect kind key (e.g. `__computeEffects`) to
                effect table, optionally with `__observerArgCache`.
            context: The prototype's cache context; a fresh one if omitted.

        Returns:
            The compacted copy.
        """
        context = context if context is not None else CacheContext()
        effects = copy.deepcopy(dict(raw_effects), self._keep_registered())
        context.reserve(_cache_names(effects))

        # Phase 1: every record, so all cache names get their token
        for kind in EffectKind:
            if kind.has_records and effects.get(kind.value):
                self._compact_table(effects[kind.value], context)

        # Phase 2: rekey the observer cache through the finished alias map
        arg_cache = effects.get(OBSERVER_ARG_CACHE)
        if arg_cache is not None:
            effects[OBSERVER_ARG_CACHE] = self._patch_observer_arg_cache(
                arg_cache, context
            )

        return effects

    def compact_template(
        self, raw_template_info: Mapping[str, Any], context: Optional[CacheContext] = None
    ) -> Dict[str, Any]:
        """Compact a template info tree, including all nested templates.

        Nested templates are visited breadth-first through a single worklist
        of node infos, so every level is handled exactly once.
        """
        context = context if context is not None else CacheContext()
        template_info = copy.deepcopy(
            dict(raw_template_info), self._keep_registered()
        )
        context.reserve(_cache_names(template_info))

        tables: List[EffectTable] = []
        self._strip_template_info(template_info, tables)

        queue: Deque[Dict[str, Any]] = deque(template_info.get(NODE_INFO_LIST) or [])
        while queue:
            node_info = queue.popleft()

            nested = node_info.get(TEMPLATE_INFO)
            if nested:
                self._strip_template_info(nested, tables)
                content = nested.get(CONTENT)
                if isinstance(content, str):
                    nested[CONTENT] = Fragment(content)
                queue.extend(nested.get(NODE_INFO_LIST) or [])

            for binding in node_info.get(BINDINGS) or []:
                self._compact_binding(binding)

        for table in tables:
            self._compact_table(table, context)

        return template_info

    def _keep_registered(self) -> Dict[int, Any]:
        # deepcopy memo: registered callables are copied as themselves, so
        # bound methods and partials still match by identity afterwards
        return {id(fn): fn for fn in self.registry.callables()}

    def _strip_template_info(
        self, template_info: Dict[str, Any], tables: List[EffectTable]
    ) -> None:
        template_info.pop(DYNAMIC_FNS, None)
        _strip_falsy(template_info, (STRIP_WHITESPACE,))
        if template_info.get(PROPERTY_EFFECTS):
            tables.append(template_info[PROPERTY_EFFECTS])

    def _compact_binding(self, binding: Dict[str, Any]) -> None:
        """Drop binding fields the runtime loader can rebuild or default."""
        for part in binding.get(PARTS) or []:
            _strip_falsy(part, ("event",))

            signature = part.get("signature")
            if signature:
                if signature.get("args"):
                    for dependency in part.get("dependencies") or []:
                        if isinstance(dependency, dict):
                            _strip_falsy(dependency, _PATH_FLAGS)
                    signature.pop("args", None)
                    signature.pop("cacheName", None)
            else:
                part.pop("signature", None)

            if part.get("mode"):
                binding["mode"] = part.pop("mode")
            if "source" in part and part["source"] == binding.get("target"):
                del part["source"]

            _strip_falsy(part, ("customEvent", "negate"))
            if part.get("compoundIndex") == 0:
                del part["compoundIndex"]
            if signature:
                part.pop("source", None)

        _strip_falsy(
            binding, ("listenerNegate", "listenerEvent", "isCompound", "literal", "kind")
        )

    def _compact_table(self, table: EffectTable, context: CacheContext) -> None:
        for trigger, records in table.items():
            if isinstance(records, list):
                table[trigger] = [
                    self._compact_record(record, context) for record in records
                ]

    def _compact_record(
        self, record: Mapping[str, Any], context: CacheContext
    ) -> Dict[str, Any]:
        # trigger and info may be shared between records, so build new mappings
        compacted: Dict[str, Any] = {}
        for key, value in record.items():
            if key == "fn":
                compacted[key] = self._symbolize(value)
            elif key == "trigger" and isinstance(value, Mapping):
                compacted[key] = _without(
                    value, drop=("rootProperty",), falsy=_PATH_FLAGS
                )
            elif key == "info" and isinstance(value, Mapping):
                compacted[key] = self._compact_info(value, context)
            else:
                compacted[key] = value
        return compacted

    def _compact_info(
        self, info: Mapping[str, Any], context: CacheContext
    ) -> Dict[str, Any]:
        compacted = _without(info, drop=("part",), falsy=("methodInfo", "dynamicFn"))
        if "args" in compacted:
            compacted["args"] = _strip_args(compacted["args"])
        if compacted.get("cacheName"):
            compacted["cacheName"] = context.resolve(compacted["cacheName"])
        return compacted

    def _symbolize(self, fn: Any) -> Any:
        ref = self.registry.symbol_for(fn)
        if ref is None:
            if self.config.warn_unresolved:
                log.warning(
                    "Effect function %r is not registered; emitting it unresolved",
                    fn,
                )
            return fn
        return ref

    def _patch_observer_arg_cache(
        self, arg_cache: Mapping[str, Any], context: CacheContext
    ) -> Dict[str, Any]:
        patched: Dict[str, Any] = {}
        for cache_name, args in arg_cache.items():
            token = context.lookup(cache_name)
            if token is None:
                log.debug("Dropping unreferenced observer cache entry %s", cache_name)
                continue
            patched[token] = _strip_args(args)
        return patched
