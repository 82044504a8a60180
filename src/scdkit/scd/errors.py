"""Configuration errors raised before any SCD query text is built."""

from __future__ import annotations


class SCDConfigError(ValueError):
    """Base class for invalid SCD configurations."""


class InvalidStrategy(SCDConfigError):
    """Raised when the strategy tag is neither 'check' nor 'timestamp'."""
    def __init__(self, strategy: object):
        self.strategy = strategy
        super().__init__(f'Invalid strategy: {strategy}. Must be "check" or "timestamp".')


class MissingRequiredField(SCDConfigError):
    """Raised when a field required by the chosen strategy is absent or empty."""
    def __init__(self, field: str, reason: str | None = None):
        self.field = field
        message = f"Missing required field '{field}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
