"""
Sink Exceptions
===============

Error hierarchy for configuration resolution and pipeline assembly.

- ConfigurationError: an option value is invalid or unknown
- ContractViolationError: a named implementation cannot fill its role
- CompatibilityError: two independently valid settings conflict
- DataError: a record cannot be handled at processing time
"""

from typing import Any, Optional


class SinkError(Exception):
    """Base class for all sink errors."""


class ConfigurationError(SinkError, ValueError):
    """
    Invalid or unknown option value.

    Raised for unknown strategy/handler names, malformed structured lists,
    invalid projection modes and pattern/range mismatches.

    Attributes:
        option: Name of the offending option, if known.
        value: The rejected raw value, if known.
    """

    def __init__(
        self,
        message: str,
        option: Optional[str] = None,
        value: Any = None,
    ):
        super().__init__(message)
        self.option = option
        self.value = value


class ContractViolationError(ConfigurationError):
    """A name resolved to an implementation that violates its construction or behavioral contract."""


class CompatibilityError(ConfigurationError):
    """Two strategies that are valid in isolation are mutually invalid."""


class DataError(SinkError, ValueError):
    """A record is missing data a strategy or stage requires."""
