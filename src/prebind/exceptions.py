"""Prebind Exceptions

Custom exceptions for the binding pre-build library.
"""

from __future__ import annotations


class PrebindError(Exception):
    """Base exception for all prebind errors."""

    pass


class BindingInvariantError(PrebindError):
    """Raised when a binding descriptor is structurally invalid."""

    def __init__(self, message: str, target_path: str | None = None):
        self.target_path = target_path
        super().__init__(message)


class SerializationError(PrebindError):
    """Raised when a canonical value contains a leaf that cannot be rendered."""

    def __init__(self, value: object, path: str):
        self.value = value
        self.path = path
        super().__init__(
            f"Cannot serialize {type(value).__name__} at {path or '<root>'}"
        )


class LoadError(PrebindError):
    """Raised when serialized metadata cannot be read back."""

    def __init__(self, message: str, position: int | None = None):
        self.position = position
        if position is not None:
            message = f"{message} (at offset {position})"
        super().__init__(message)


class ConfigError(PrebindError):
    """Raised when a prebind configuration file is invalid."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Invalid config {path}: {reason}")


class UnknownFunctionError(PrebindError):
    """Raised when a symbolic function reference has no registered implementation."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No effect function registered as '{name}'")
