"""Exception types shared across the package."""

from __future__ import annotations


class NineLadiesError(Exception):
    """Base class for all nine-ladies failures."""


class ConfigError(NineLadiesError):
    """Prompt file or run configuration is unusable; aborts the run."""


class RequestFailed(NineLadiesError):
    """A backend call failed (transport, timeout, server error, bad payload)."""
