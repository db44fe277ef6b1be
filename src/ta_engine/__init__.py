"""Technical indicator engine package root."""

from ta_engine.engine import compute_indicators
from ta_engine.exceptions import (ConfigError, DataSourceError,
                                  DataValidationError, IndicatorError,
                                  ValidationError)
from ta_engine.signals import (get_bollinger_signal, get_macd_signal,
                               get_rsi_signal, summarize_signals)
from ta_engine.types import Bar, IndicatorConfig, IndicatorKind, IndicatorResult

__all__ = [
    "compute_indicators",
    "get_rsi_signal",
    "get_macd_signal",
    "get_bollinger_signal",
    "summarize_signals",
    "Bar",
    "IndicatorConfig",
    "IndicatorKind",
    "IndicatorResult",
    "IndicatorError",
    "ConfigError",
    "DataValidationError",
    "ValidationError",
    "DataSourceError",
]
