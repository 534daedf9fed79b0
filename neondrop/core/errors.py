"""
Errors
======

Exception types shared by the FLOAT core.

- ConfigurationError: invalid or missing seed, out-of-range stack height,
  inconsistent configuration values. Always fatal to the offending call.
- UnroutableInput: a key that is not a game key in the current context.
  Expected during normal play and never surfaced to callers.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when construction or a call receives invalid configuration."""


class UnroutableInput(LookupError):
    """Raised internally when a key event has no game meaning."""

    def __init__(self, key: object, reason: str = "unmapped"):
        super().__init__(f"Unroutable key {key!r}: {reason}")
        self.key = key
        self.reason = reason
