"""Configuration parsing for prebind.yaml"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

from prebind.exceptions import ConfigError

DEBUG_ENV = "PREBIND_DEBUG"


class PrebindConfig(BaseModel):
    """Names used in the emitted metadata and scanner defaults.

    The defaults match the Polymer runtime loader: effect functions live on
    `Polymer.EFFECT_FUNCTIONS`, nested template content is rebuilt with
    `Polymer.stringToFrag` and the metadata is stored on
    `Polymer.PreBuiltBindings` / `Polymer.preBuiltEffects` by tag name.
    """

    namespace: str = "Polymer"
    effect_functions_key: str = "EFFECT_FUNCTIONS"
    fragment_factory: str = "stringToFrag"
    bindings_key: str = "PreBuiltBindings"
    effects_key: str = "preBuiltEffects"

    # Methods that must re-run on every change (scanner default set)
    dynamic_fns: list[str] = []

    # Log a warning for effect functions missing from the registry
    warn_unresolved: bool = True

    model_config = {"extra": "forbid"}

    @property
    def function_prefix(self) -> str:
        return f"{self.namespace}.{self.effect_functions_key}"

    @property
    def fragment_prefix(self) -> str:
        return f"{self.namespace}.{self.fragment_factory}"

    @classmethod
    def load(cls, path: Path) -> "PrebindConfig":
        """Load config from yaml file"""
        if not path.exists():
            return cls()

        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(str(path), "not valid YAML") from exc

        if not isinstance(data, dict):
            raise ConfigError(str(path), "top level must be a mapping")

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(path), str(exc)) from exc


def debug_enabled() -> bool:
    return bool(os.environ.get(DEBUG_ENV))
