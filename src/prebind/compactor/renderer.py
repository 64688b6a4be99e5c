"""Renderer - converts canonical metadata to embeddable script text."""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional

import msgspec
from jinja2 import Environment

from prebind.compactor.compactor import CompactedPrototype
from prebind.compactor.spec import CodeLiteral, single_quote
from prebind.config import PrebindConfig
from prebind.exceptions import SerializationError

# Object keys matching this are emitted without quotes
IDENTIFIER = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*\Z")

ASSIGNMENT_TEMPLATE = (
    "{{ namespace }}.{{ key }}[{{ tag_name | single_quote }}] = {{ metadata }};"
)


def get_prebind_jinja_env() -> Environment:
    """Create a Jinja2 Environment with prebind filters.

    Returns:
        Configured Jinja2 Environment.
    """
    env = Environment(autoescape=False, keep_trailing_newline=False)
    env.filters["single_quote"] = single_quote
    return env


class Serializer:
    """Renders canonical metadata to minimal, deterministic text.

    Scalars go through msgspec's JSON encoder. Mapping keys that are plain
    identifiers are left bare, and `CodeLiteral` leaves (function references,
    fragments) are written as expressions rather than strings.
    """

    def __init__(self, config: Optional[PrebindConfig] = None):
        self.config = config or PrebindConfig()
        self._encoder = msgspec.json.Encoder()
        self._assignment = get_prebind_jinja_env().from_string(ASSIGNMENT_TEMPLATE)

    def dumps(self, value: Any) -> str:
        """Render a canonical value.

        Raises:
            SerializationError: a leaf is neither a JSON scalar nor a code literal.
        """
        out: List[str] = []
        self._render(value, out, "")
        return "".join(out)

    def assignment(self, key: str, tag_name: str, value: Any) -> str:
        """Render `Polymer.<key>['<tag-name>'] = <value>;`."""
        return self._assignment.render(
            namespace=self.config.namespace,
            key=key,
            tag_name=tag_name,
            metadata=self.dumps(value),
        )

    def embed(self, prototype: CompactedPrototype) -> str:
        """Render the assignments for both metadata tables of an element."""
        statements = []
        if prototype.bindings is not None:
            statements.append(
                self.assignment(
                    self.config.bindings_key, prototype.tag_name, prototype.bindings
                )
            )
        if prototype.effects is not None:
            statements.append(
                self.assignment(
                    self.config.effects_key, prototype.tag_name, prototype.effects
                )
            )
        return "\n".join(statements)

    def _render(self, value: Any, out: List[str], path: str) -> None:
        if isinstance(value, CodeLiteral):
            out.append(value.render(self.config))
        elif isinstance(value, Mapping):
            out.append("{")
            for index, (key, item) in enumerate(value.items()):
                if index:
                    out.append(",")
                key = str(key)
                out.append(key if IDENTIFIER.match(key) else self._scalar(key, path))
                out.append(":")
                self._render(item, out, f"{path}.{key}")
            out.append("}")
        elif isinstance(value, (list, tuple)):
            out.append("[")
            for index, item in enumerate(value):
                if index:
                    out.append(",")
                self._render(item, out, f"{path}[{index}]")
            out.append("]")
        elif value is None or isinstance(value, (str, int, float)):
            out.append(self._scalar(value, path))
        else:
            raise SerializationError(value, path)

    def _scalar(self, value: Any, path: str) -> str:
        try:
            return self._encoder.encode(value).decode()
        except (TypeError, ValueError, OverflowError) as exc:
            raise SerializationError(value, path) from exc
