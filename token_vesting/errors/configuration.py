"""Configuration error classification."""

from typing import Any, Optional


class ConfigurationError(Exception):
    """Configuration or vesting-type definition failed validation."""

    def __init__(self, message: str, errors: Optional[list[Any]] = None,
                 source: Optional[str] = None):
        super().__init__(message)
        self.errors = errors or []
        self.source = source
