"""Core type definitions for the indicator engine.

All data models use Pydantic BaseModel so results serialize to JSON and
configuration errors surface when a model is constructed.
"""

from __future__ import annotations

import math
from enum import Enum
from numbers import Integral
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ta_engine.exceptions import ConfigError

# ---------------------------------------------------------------------------
# Base Configuration
# ---------------------------------------------------------------------------


class FrozenModel(BaseModel):
    """Base model with frozen (immutable) configuration."""

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Market Data Types
# ---------------------------------------------------------------------------


class Bar(FrozenModel):
    """One interval's OHLCV summary.

    OHLC consistency and timestamp ordering are not checked here; they are the
    job of :func:`ta_engine.validation.validate_bars`.

    :param timestamp: Epoch milliseconds for the bar (strictly increasing).
    :param open: Opening price.
    :param high: Highest price during the bar period.
    :param low: Lowest price during the bar period.
    :param close: Closing price.
    :param volume: Trading volume during the bar period.
    """

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


# ---------------------------------------------------------------------------
# Indicator Output Types
# ---------------------------------------------------------------------------


class IndicatorPoint(FrozenModel):
    """Single value of an indicator, aligned to the bar where it is defined.

    :param timestamp: Timestamp of the bar this value belongs to.
    :param value: Indicator value.
    """

    timestamp: int
    value: float


class RSIPoint(IndicatorPoint):
    """RSI value with the display flags used by RSI charts.

    :param overbought: True when the value is above 70.
    :param oversold: True when the value is below 30.
    """

    overbought: bool = False
    oversold: bool = False


class MACDPoint(FrozenModel):
    """MACD line, signal line and histogram at one bar.

    :param timestamp: Timestamp of the bar this point belongs to.
    :param macd: Fast EMA minus slow EMA.
    :param signal: EMA of the MACD line.
    :param histogram: ``macd - signal``.
    """

    timestamp: int
    macd: float
    signal: float
    histogram: float


class BollingerPoint(FrozenModel):
    """Bollinger Bands at one bar.

    :param timestamp: Timestamp of the bar this point belongs to.
    :param upper: Middle band plus ``k`` standard deviations.
    :param middle: Simple moving average of the window.
    :param lower: Middle band minus ``k`` standard deviations.
    :param bandwidth: ``upper - lower``.
    """

    timestamp: int
    upper: float
    middle: float
    lower: float
    bandwidth: float


class IndicatorResult(FrozenModel):
    """Output of a batch engine call.

    Indicators that were not requested (or lack enough history) are empty.
    """

    rsi: list[RSIPoint] = Field(default_factory=list)
    macd: list[MACDPoint] = Field(default_factory=list)
    bollinger: list[BollingerPoint] = Field(default_factory=list)
    sma: dict[int, list[IndicatorPoint]] = Field(default_factory=dict)
    ema: dict[int, list[IndicatorPoint]] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Configuration Types
# ---------------------------------------------------------------------------


class IndicatorKind(str, Enum):
    """Indicators the engine knows how to compute."""

    RSI = "rsi"
    MACD = "macd"
    BOLLINGER = "bollinger"
    SMA = "sma"
    EMA = "ema"


def check_period(name: str, value: int) -> None:
    """Raise ConfigError unless ``value`` is a positive integer."""
    if isinstance(value, bool) or not isinstance(value, Integral) or value <= 0:
        raise ConfigError(f"'{name}' must be a positive integer, got {value!r}")


class RSIConfig(FrozenModel):
    """RSI settings.

    :param period: Wilder smoothing period.
    """

    period: int = 14

    @model_validator(mode="after")
    def _validate(self) -> RSIConfig:
        check_period("period", self.period)
        return self


class MACDConfig(FrozenModel):
    """MACD settings.

    :param fast_period: Period of the fast EMA.
    :param slow_period: Period of the slow EMA, must exceed ``fast_period``.
    :param signal_period: Period of the signal-line EMA.
    """

    fast_period: int = 12
    slow_period: int = 26
    signal_period: int = 9

    @model_validator(mode="after")
    def _validate(self) -> MACDConfig:
        check_period("fast_period", self.fast_period)
        check_period("slow_period", self.slow_period)
        check_period("signal_period", self.signal_period)
        if self.fast_period >= self.slow_period:
            raise ConfigError(
                f"'fast_period' ({self.fast_period}) must be less than "
                f"'slow_period' ({self.slow_period})"
            )
        return self


class BollingerConfig(FrozenModel):
    """Bollinger Bands settings.

    :param period: Window length for the middle band and deviation.
    :param standard_deviations: Band width multiplier ``k``.
    """

    period: int = 20
    standard_deviations: float = 2.0

    @model_validator(mode="after")
    def _validate(self) -> BollingerConfig:
        check_period("period", self.period)
        k = self.standard_deviations
        if not math.isfinite(k) or k <= 0:
            raise ConfigError(
                f"'standard_deviations' must be a positive finite number, got {k!r}"
            )
        return self


class MovingAverageConfig(FrozenModel):
    """Periods for a family of moving averages (SMA or EMA).

    :param periods: Periods to compute, each independently.
    """

    periods: tuple[int, ...] = (20, 50, 200)

    @model_validator(mode="after")
    def _validate(self) -> MovingAverageConfig:
        if not self.periods:
            raise ConfigError("'periods' must be a non-empty list")
        for period in self.periods:
            check_period("periods", period)
        return self


class IndicatorConfig(FrozenModel):
    """Complete engine configuration resolved at the call boundary.

    :param indicators: Set of indicators to compute.
    :param rsi: RSI settings.
    :param macd: MACD settings.
    :param bollinger: Bollinger Bands settings.
    :param sma: SMA periods.
    :param ema: EMA periods.
    """

    indicators: frozenset[IndicatorKind] = frozenset(IndicatorKind)
    rsi: RSIConfig = Field(default_factory=RSIConfig)
    macd: MACDConfig = Field(default_factory=MACDConfig)
    bollinger: BollingerConfig = Field(default_factory=BollingerConfig)
    sma: MovingAverageConfig = Field(default_factory=MovingAverageConfig)
    ema: MovingAverageConfig = Field(
        default_factory=lambda: MovingAverageConfig(periods=(12, 26))
    )

    @field_validator("indicators", mode="before")
    @classmethod
    def _parse_indicators(cls, value: Any) -> frozenset[IndicatorKind]:
        if isinstance(value, (str, IndicatorKind)):
            value = [value]
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise ConfigError("'indicators' must be a list of indicator names")
        kinds = set()
        for item in value:
            try:
                kinds.add(IndicatorKind(item))
            except ValueError:
                raise ConfigError(
                    f"Unknown indicator '{item}'. "
                    f"Valid options: {sorted(k.value for k in IndicatorKind)}"
                ) from None
        return frozenset(kinds)

    def wants(self, kind: IndicatorKind) -> bool:
        """Return True if ``kind`` was requested."""
        return kind in self.indicators


# ---------------------------------------------------------------------------
# Incremental (Streaming) State
# ---------------------------------------------------------------------------


class EMAState(FrozenModel):
    """Smoothing state needed to extend an EMA by one value.

    :param period: EMA period.
    :param timestamp: Timestamp of the last consumed bar.
    :param value: Last EMA value.
    """

    period: int
    timestamp: int
    value: float


class RSIState(FrozenModel):
    """Wilder averages after the last consumed bar.

    :param period: RSI period.
    :param timestamp: Timestamp of the last consumed bar.
    :param last_close: Close of the last consumed bar.
    :param avg_gain: Smoothed average gain.
    :param avg_loss: Smoothed average loss.
    """

    period: int
    timestamp: int
    last_close: float
    avg_gain: float
    avg_loss: float


class MACDState(FrozenModel):
    """EMA states behind the MACD line and its signal line."""

    timestamp: int
    fast: EMAState
    slow: EMAState
    signal: EMAState


class BollingerState(FrozenModel):
    """Rolling window state for Bollinger Bands.

    :param period: Window length.
    :param standard_deviations: Band width multiplier.
    :param timestamp: Timestamp of the last consumed bar.
    :param window: Last ``period`` closes, oldest first.
    :param mean: Mean of ``window``.
    :param m2: Sum of squared deviations of ``window`` from ``mean``.
    :param flat_run: Number of trailing equal closes, capped at ``period``.
    :param steps: Updates since ``mean`` and ``m2`` were last summed exactly.
    """

    period: int
    standard_deviations: float
    timestamp: int
    window: tuple[float, ...]
    mean: float
    m2: float
    flat_run: int
    steps: int = 0


# ---------------------------------------------------------------------------
# Signal Types
# ---------------------------------------------------------------------------


class ZoneSignal(str, Enum):
    """Overbought/oversold classification."""

    OVERBOUGHT = "overbought"
    OVERSOLD = "oversold"
    NEUTRAL = "neutral"


class TrendSignal(str, Enum):
    """Direction of the MACD histogram."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class Crossover(str, Enum):
    """Direction of a MACD/signal line crossover."""

    BULLISH = "bullish"
    BEARISH = "bearish"


class RSISignal(FrozenModel):
    """RSI classification with a 0-1 strength."""

    signal: ZoneSignal
    strength: float


class MACDSignal(FrozenModel):
    """MACD classification; ``crossover`` is None without previous data."""

    signal: TrendSignal
    crossover: Crossover | None = None


class BollingerSignal(FrozenModel):
    """Bollinger classification; ``percent_b`` is unbounded."""

    signal: ZoneSignal
    percent_b: float


class SignalSummary(FrozenModel):
    """Signals for the latest bar of an :class:`IndicatorResult`."""

    timestamp: int | None = None
    rsi: RSISignal | None = None
    macd: MACDSignal | None = None
    bollinger: BollingerSignal | None = None
