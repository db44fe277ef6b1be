"""Relative Strength Index with Wilder smoothing."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import numpy as np
from numpy.typing import NDArray

from ta_engine.indicators.moving_averages import closes_of
from ta_engine.types import RSIPoint, RSIState, check_period
from ta_engine.validation import validate_bars, validate_next_bar

if TYPE_CHECKING:
    from ta_engine.types import Bar

# Display flags on RSIPoint, strict comparisons
OVERBOUGHT_LEVEL = 70.0
OVERSOLD_LEVEL = 30.0


def rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    """Convert Wilder averages to an RSI value in [0, 100].

    A market with no losses reads 100; a flat market reads 50.
    """
    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else 50.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def wilder_next(average: float, value: float, period: int) -> float:
    return (average * (period - 1) + value) / period


def _split_delta(delta: float) -> tuple[float, float]:
    """Split a close-to-close change into (gain, loss)."""
    if delta > 0:
        return delta, 0.0
    if delta < 0:
        return 0.0, -delta
    return 0.0, 0.0


def _rsi_run(
    closes: NDArray[np.float64], period: int
) -> tuple[list[float], float, float]:
    """Run the Wilder recurrence over ``closes``.

    :returns: RSI values (one per bar from index ``period``) and the final
        average gain and loss.
    """
    if len(closes) < period + 1:
        return [], 0.0, 0.0

    deltas = np.diff(closes).tolist()
    gains = []
    losses = []
    for delta in deltas:
        gain, loss = _split_delta(delta)
        gains.append(gain)
        losses.append(loss)

    avg_gain = float(np.mean(gains[:period]))
    avg_loss = float(np.mean(losses[:period]))
    values = [rsi_from_averages(avg_gain, avg_loss)]

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = wilder_next(avg_gain, gain, period)
        avg_loss = wilder_next(avg_loss, loss, period)
        values.append(rsi_from_averages(avg_gain, avg_loss))

    return values, avg_gain, avg_loss


def _point(timestamp: int, value: float) -> RSIPoint:
    return RSIPoint(
        timestamp=timestamp,
        value=value,
        overbought=value > OVERBOUGHT_LEVEL,
        oversold=value < OVERSOLD_LEVEL,
    )


def rsi_points(
    bars: Sequence[Bar], closes: NDArray[np.float64], period: int
) -> list[RSIPoint]:
    values, _, _ = _rsi_run(closes, period)
    return [
        _point(bars[i].timestamp, value)
        for i, value in enumerate(values, start=period)
    ]


def calculate_rsi(bars: Sequence[Bar], period: int = 14) -> list[RSIPoint]:
    """Wilder-smoothed RSI of closes.

    :param bars: Time-ordered bars.
    :param period: Smoothing period.
    :returns: One point per bar from index ``period``; empty if there are
        fewer than ``period + 1`` bars.
    :raises ConfigError: If ``period`` is not positive.
    :raises DataValidationError: If ``bars`` is malformed.
    """
    check_period("period", period)
    validate_bars(bars)
    return rsi_points(bars, closes_of(bars), period)


def rsi_checkpoint(bars: Sequence[Bar], period: int = 14) -> RSIState | None:
    """Wilder averages after a batch RSI pass, or None before warm-up ends."""
    check_period("period", period)
    validate_bars(bars)
    values, avg_gain, avg_loss = _rsi_run(closes_of(bars), period)
    if not values:
        return None
    return RSIState(
        period=period,
        timestamp=bars[-1].timestamp,
        last_close=bars[-1].close,
        avg_gain=avg_gain,
        avg_loss=avg_loss,
    )


def update_rsi(state: RSIState, bar: Bar) -> tuple[RSIPoint, RSIState]:
    """Extend the RSI by one bar.

    :param state: State from :func:`rsi_checkpoint` or a previous update.
    :param bar: Next bar.
    :returns: The new point and the state for the following bar.
    :raises DataValidationError: If ``bar`` is malformed or out of order.
    """
    validate_next_bar(bar, state.timestamp)
    gain, loss = _split_delta(bar.close - state.last_close)
    avg_gain = wilder_next(state.avg_gain, gain, state.period)
    avg_loss = wilder_next(state.avg_loss, loss, state.period)
    new_state = RSIState(
        period=state.period,
        timestamp=bar.timestamp,
        last_close=bar.close,
        avg_gain=avg_gain,
        avg_loss=avg_loss,
    )
    return _point(bar.timestamp, rsi_from_averages(avg_gain, avg_loss)), new_state
