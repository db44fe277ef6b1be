"""Indicator engine exception hierarchy.

All engine-specific exceptions derive from :class:`IndicatorError` so callers can
catch every failure raised by the engine uniformly.

Insufficient history is never an exception: calculators return an empty
sequence for it.
"""

from __future__ import annotations


class IndicatorError(Exception):
    """Base class for indicator engine exceptions."""


class ConfigError(IndicatorError):
    """Raised when an indicator configuration or config file is invalid."""


class DataValidationError(IndicatorError):
    """Raised when a bar sequence or a classifier input fails validation.

    Named DataValidationError to avoid conflict with pydantic's ValidationError.
    """


# Public name used by callers that follow the engine's error taxonomy.
ValidationError = DataValidationError


class DataSourceError(IndicatorError):
    """Raised when reading bars from a file fails."""


__all__ = [
    "IndicatorError",
    "ConfigError",
    "DataValidationError",
    "ValidationError",
    "DataSourceError",
]
