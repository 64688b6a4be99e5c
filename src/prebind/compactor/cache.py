"""Cache-name remapping - dense aliases for long observer cache keys."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Set


@dataclass
class CacheContext:
    """Alias table for one prototype's compaction pass.

    The runtime keys observer argument lists by a long cache name that is
    repeated in every effect using it. Each distinct name gets the next free
    integer (as a string) in order of first use. Contexts are never shared
    between prototypes.

    Tokens issued by this context resolve to themselves, so compacted output
    can be compacted again without renumbering. Raw names that look like
    tokens (`"1"`) must be `reserve`d before resolving starts; a reserved
    name is never issued as a token.
    """

    alias_map: Dict[str, str] = field(default_factory=dict)
    next_index: int = 0
    _tokens: Set[str] = field(default_factory=set, repr=False)
    _reserved: Set[str] = field(default_factory=set, repr=False)

    def reserve(self, keys: Iterable[str]) -> None:
        """Mark raw cache names so no token is issued with the same text.

        Names that are already tokens of this context stay tokens.
        """
        for key in keys:
            if key not in self._tokens:
                self._reserved.add(key)

    def resolve(self, key: str) -> str:
        """Return the token for `key`, assigning the next free one on first use."""
        token = self.lookup(key)
        if token is None:
            while (
                str(self.next_index) in self._reserved
                or str(self.next_index) in self.alias_map
            ):
                self.next_index += 1
            token = str(self.next_index)
            self.next_index += 1
            self.alias_map[key] = token
            self._tokens.add(token)
        return token

    def lookup(self, key: str) -> Optional[str]:
        """Return the token for `key` without assigning one."""
        if key in self._tokens:
            return key
        return self.alias_map.get(key)

    def __len__(self) -> int:
        return len(self.alias_map)
