"""Error hierarchy shared by the chronicle layers."""

from __future__ import annotations


class ChronicleError(RuntimeError):
    """Base class for chronicle errors."""


class ConfigError(ChronicleError):
    """Raised when the configuration or command-line input is unusable."""


class StateError(ChronicleError):
    """Raised when the persisted state cannot be read or written."""


class CollectorError(ChronicleError):
    """Raised when a single source cannot be observed.

    The orchestrator skips the source and keeps going.
    """


__all__ = ["ChronicleError", "CollectorError", "ConfigError", "StateError"]
