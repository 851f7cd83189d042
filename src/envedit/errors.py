"""Error kinds raised by the env store.

I/O failures are not wrapped: ``OSError`` and its subclasses propagate as-is.
"""

from __future__ import annotations


class EnvEditError(Exception):
    """Base class for envedit errors."""


class KeyNotFoundError(EnvEditError, KeyError):
    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Key not found: {self.key}"


class InvalidEncodingError(EnvEditError, ValueError):
    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Value of {self.key} is not valid UTF-8"


class AlreadyEnabledError(EnvEditError):
    """Enable was requested on a line that does not start with ``#``."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"{self.key} is already enabled"


class IndexCorruptionError(EnvEditError, RuntimeError):
    """An index entry or splice range falls outside the buffer."""
