"""Simple and exponential moving averages.

These are the building blocks for MACD and Bollinger Bands. All arithmetic
stays in full float64 precision; rounding happens only in
:mod:`ta_engine.formatting`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from numpy.typing import NDArray

from ta_engine.exceptions import ConfigError
from ta_engine.types import EMAState, IndicatorPoint, check_period
from ta_engine.validation import validate_bars, validate_next_bar

if TYPE_CHECKING:
    from ta_engine.types import Bar


def closes_of(bars: Sequence[Bar]) -> NDArray[np.float64]:
    """Return bar closes as a float64 array."""
    return np.array([bar.close for bar in bars], dtype=np.float64)


def sma_values(values: NDArray[np.float64], period: int) -> NDArray[np.float64]:
    """Mean of every full window of ``period`` values.

    :returns: Array of length ``max(0, len(values) - period + 1)``.
    """
    if len(values) < period:
        return np.empty(0, dtype=np.float64)
    return sliding_window_view(values, period).mean(axis=1)


def ema_multiplier(period: int) -> float:
    return 2.0 / (period + 1)


def ema_next(previous: float, value: float, period: int) -> float:
    """Advance an EMA by one value."""
    return (value - previous) * ema_multiplier(period) + previous


def ema_values(values: NDArray[np.float64], period: int) -> list[float]:
    """EMA seeded with the SMA of the first ``period`` values.

    :returns: List of length ``max(0, len(values) - period + 1)``.
    """
    if len(values) < period:
        return []

    # Same window mean as the first SMA value so the two agree exactly.
    current = float(sma_values(values, period)[0])
    result = [current]
    for value in values[period:].tolist():
        current = ema_next(current, value, period)
        result.append(current)
    return result


def _to_points(
    bars: Sequence[Bar], values: Iterable[float], period: int
) -> list[IndicatorPoint]:
    return [
        IndicatorPoint(timestamp=bars[i].timestamp, value=float(v))
        for i, v in enumerate(values, start=period - 1)
    ]


# ---------------------------------------------------------------------------
# Batch API
# ---------------------------------------------------------------------------


def calculate_sma(bars: Sequence[Bar], period: int) -> list[IndicatorPoint]:
    """Simple moving average of closes.

    :param bars: Time-ordered bars.
    :param period: Window length.
    :returns: One point per bar from index ``period - 1``; empty if there are
        fewer than ``period`` bars.
    :raises ConfigError: If ``period`` is not positive.
    :raises DataValidationError: If ``bars`` is malformed.
    """
    check_period("period", period)
    validate_bars(bars)
    return sma_points(bars, closes_of(bars), period)


def calculate_ema(bars: Sequence[Bar], period: int) -> list[IndicatorPoint]:
    """Exponential moving average of closes, seeded with the SMA.

    :param bars: Time-ordered bars.
    :param period: EMA period; multiplier is ``2 / (period + 1)``.
    :returns: One point per bar from index ``period - 1``; empty if there are
        fewer than ``period`` bars.
    :raises ConfigError: If ``period`` is not positive.
    :raises DataValidationError: If ``bars`` is malformed.
    """
    check_period("period", period)
    validate_bars(bars)
    return ema_points(bars, closes_of(bars), period)


def calculate_sma_periods(
    bars: Sequence[Bar], periods: Iterable[int]
) -> dict[int, list[IndicatorPoint]]:
    """SMA for several periods, computed independently."""
    periods = _checked_periods(periods)
    validate_bars(bars)
    closes = closes_of(bars)
    return {period: sma_points(bars, closes, period) for period in periods}


def calculate_ema_periods(
    bars: Sequence[Bar], periods: Iterable[int]
) -> dict[int, list[IndicatorPoint]]:
    """EMA for several periods, computed independently."""
    periods = _checked_periods(periods)
    validate_bars(bars)
    closes = closes_of(bars)
    return {period: ema_points(bars, closes, period) for period in periods}


def _checked_periods(periods: Iterable[int]) -> list[int]:
    periods = list(periods)
    if not periods:
        raise ConfigError("'periods' must be a non-empty list")
    for period in periods:
        check_period("periods", period)
    return periods


def sma_points(
    bars: Sequence[Bar], closes: NDArray[np.float64], period: int
) -> list[IndicatorPoint]:
    return _to_points(bars, sma_values(closes, period).tolist(), period)


def ema_points(
    bars: Sequence[Bar], closes: NDArray[np.float64], period: int
) -> list[IndicatorPoint]:
    return _to_points(bars, ema_values(closes, period), period)


# ---------------------------------------------------------------------------
# Incremental API
# ---------------------------------------------------------------------------


def ema_checkpoint(bars: Sequence[Bar], period: int) -> EMAState | None:
    """Smoothing state after a batch EMA pass over ``bars``.

    :returns: State to pass to :func:`update_ema`, or None if ``bars`` is too
        short to define the EMA yet.
    """
    check_period("period", period)
    validate_bars(bars)
    values = ema_values(closes_of(bars), period)
    if not values:
        return None
    return EMAState(period=period, timestamp=bars[-1].timestamp, value=values[-1])


def update_ema(state: EMAState, bar: Bar) -> tuple[IndicatorPoint, EMAState]:
    """Extend an EMA by one bar.

    :param state: State returned by :func:`ema_checkpoint` or a previous update.
    :param bar: Next bar; must be valid and later than ``state.timestamp``.
    :returns: The new point and the state to use for the following bar.
    :raises DataValidationError: If ``bar`` is malformed or out of order.
    """
    validate_next_bar(bar, state.timestamp)
    value = ema_next(state.value, bar.close, state.period)
    new_state = EMAState(period=state.period, timestamp=bar.timestamp, value=value)
    return IndicatorPoint(timestamp=bar.timestamp, value=value), new_state
