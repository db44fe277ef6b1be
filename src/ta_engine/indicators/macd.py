"""Moving Average Convergence Divergence."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import numpy as np
from numpy.typing import NDArray

from ta_engine.indicators.moving_averages import closes_of, ema_next, ema_values
from ta_engine.types import EMAState, MACDConfig, MACDPoint, MACDState
from ta_engine.validation import validate_bars, validate_next_bar

if TYPE_CHECKING:
    from ta_engine.types import Bar


def macd_warmup(config: MACDConfig) -> int:
    """Number of bars needed before the first MACD point."""
    return config.slow_period + config.signal_period - 1


def _macd_run(
    closes: NDArray[np.float64], config: MACDConfig
) -> tuple[list[float], list[float], list[float], list[float]]:
    """Compute the MACD line, signal line and the EMAs behind them.

    The MACD line starts at bar ``slow_period - 1``, the signal line
    ``signal_period - 1`` MACD values later.

    :returns: (macd_line, signal_line, fast_ema, slow_ema), the EMAs aligned
        with ``macd_line``.
    """
    fast = ema_values(closes, config.fast_period)
    slow = ema_values(closes, config.slow_period)
    if not slow:
        return [], [], [], []

    offset = config.slow_period - config.fast_period
    fast = fast[offset:]
    macd_line = [f - s for f, s in zip(fast, slow)]
    signal_line = ema_values(
        np.array(macd_line, dtype=np.float64), config.signal_period
    )
    return macd_line, signal_line, fast, slow


def macd_points(
    bars: Sequence[Bar], closes: NDArray[np.float64], config: MACDConfig
) -> list[MACDPoint]:
    macd_line, signal_line, _, _ = _macd_run(closes, config)
    first = macd_warmup(config) - 1
    skip = config.signal_period - 1
    points = []
    for j, signal in enumerate(signal_line):
        macd = macd_line[j + skip]
        points.append(
            MACDPoint(
                timestamp=bars[first + j].timestamp,
                macd=macd,
                signal=signal,
                histogram=macd - signal,
            )
        )
    return points


def calculate_macd(
    bars: Sequence[Bar], config: MACDConfig | None = None
) -> list[MACDPoint]:
    """MACD line, signal line and histogram of closes.

    :param bars: Time-ordered bars.
    :param config: Periods; defaults to 12/26/9.
    :returns: One point per bar from index ``slow + signal - 2``; empty if
        there are fewer than ``slow + signal - 1`` bars.
    :raises DataValidationError: If ``bars`` is malformed.
    """
    config = config or MACDConfig()
    validate_bars(bars)
    return macd_points(bars, closes_of(bars), config)


def macd_checkpoint(
    bars: Sequence[Bar], config: MACDConfig | None = None
) -> MACDState | None:
    """EMA states after a batch MACD pass, or None before warm-up ends."""
    config = config or MACDConfig()
    validate_bars(bars)
    _, signal_line, fast, slow = _macd_run(closes_of(bars), config)
    if not signal_line:
        return None

    timestamp = bars[-1].timestamp
    return MACDState(
        timestamp=timestamp,
        fast=EMAState(period=config.fast_period, timestamp=timestamp, value=fast[-1]),
        slow=EMAState(period=config.slow_period, timestamp=timestamp, value=slow[-1]),
        signal=EMAState(
            period=config.signal_period, timestamp=timestamp, value=signal_line[-1]
        ),
    )


def update_macd(state: MACDState, bar: Bar) -> tuple[MACDPoint, MACDState]:
    """Extend the MACD by one bar.

    :param state: State from :func:`macd_checkpoint` or a previous update.
    :param bar: Next bar.
    :returns: The new point and the state for the following bar.
    :raises DataValidationError: If ``bar`` is malformed or out of order.
    """
    validate_next_bar(bar, state.timestamp)
    fast = ema_next(state.fast.value, bar.close, state.fast.period)
    slow = ema_next(state.slow.value, bar.close, state.slow.period)
    macd = fast - slow
    signal = ema_next(state.signal.value, macd, state.signal.period)

    ts = bar.timestamp
    new_state = MACDState(
        timestamp=ts,
        fast=EMAState(period=state.fast.period, timestamp=ts, value=fast),
        slow=EMAState(period=state.slow.period, timestamp=ts, value=slow),
        signal=EMAState(period=state.signal.period, timestamp=ts, value=signal),
    )
    point = MACDPoint(timestamp=ts, macd=macd, signal=signal, histogram=macd - signal)
    return point, new_state
