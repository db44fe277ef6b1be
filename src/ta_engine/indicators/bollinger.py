"""Bollinger Bands.

The middle band is the SMA of closes and the band offset is ``k`` times the
population standard deviation of the same window.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Sequence

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from numpy.typing import NDArray

from ta_engine.indicators.moving_averages import closes_of, sma_values
from ta_engine.types import BollingerConfig, BollingerPoint, BollingerState
from ta_engine.validation import validate_bars, validate_next_bar

if TYPE_CHECKING:
    from ta_engine.types import Bar


def _bands(timestamp: int, middle: float, sigma: float, k: float) -> BollingerPoint:
    upper = middle + k * sigma
    lower = middle - k * sigma
    return BollingerPoint(
        timestamp=timestamp,
        upper=upper,
        middle=middle,
        lower=lower,
        bandwidth=upper - lower,
    )


def bollinger_points(
    bars: Sequence[Bar], closes: NDArray[np.float64], config: BollingerConfig
) -> list[BollingerPoint]:
    period = config.period
    if len(closes) < period:
        return []

    windows = sliding_window_view(closes, period)
    middles = sma_values(closes, period)
    sigmas = windows.std(axis=1)
    # A constant window has exactly zero width.
    flat = windows.max(axis=1) == windows.min(axis=1)
    sigmas = np.where(flat, 0.0, sigmas)

    return [
        _bands(bars[i].timestamp, middle, sigma, config.standard_deviations)
        for i, (middle, sigma) in enumerate(
            zip(middles.tolist(), sigmas.tolist()), start=period - 1
        )
    ]


def calculate_bollinger_bands(
    bars: Sequence[Bar], config: BollingerConfig | None = None
) -> list[BollingerPoint]:
    """Bollinger Bands of closes.

    :param bars: Time-ordered bars.
    :param config: Period and ``k``; defaults to 20 and 2.
    :returns: One point per bar from index ``period - 1``; empty if there are
        fewer than ``period`` bars.
    :raises DataValidationError: If ``bars`` is malformed.
    """
    config = config or BollingerConfig()
    validate_bars(bars)
    return bollinger_points(bars, closes_of(bars), config)


def _window_moments(window: tuple[float, ...]) -> tuple[float, float]:
    """Two-pass mean and sum of squared deviations of ``window``."""
    mean = math.fsum(window) / len(window)
    m2 = math.fsum((value - mean) ** 2 for value in window)
    return mean, m2


def _trailing_run(window: tuple[float, ...]) -> int:
    """Number of trailing values equal to the last one."""
    run = 1
    for value in reversed(window[:-1]):
        if value != window[-1]:
            break
        run += 1
    return run


def bollinger_checkpoint(
    bars: Sequence[Bar], config: BollingerConfig | None = None
) -> BollingerState | None:
    """Rolling window state after a batch pass, or None before warm-up ends."""
    config = config or BollingerConfig()
    validate_bars(bars)
    if len(bars) < config.period:
        return None

    window = tuple(bar.close for bar in bars[-config.period :])
    flat_run = _trailing_run(window)
    if flat_run >= config.period:
        mean, m2 = window[-1], 0.0
    else:
        mean, m2 = _window_moments(window)
    return BollingerState(
        period=config.period,
        standard_deviations=config.standard_deviations,
        timestamp=bars[-1].timestamp,
        window=window,
        mean=mean,
        m2=m2,
        flat_run=flat_run,
    )


def update_bollinger_bands(
    state: BollingerState, bar: Bar
) -> tuple[BollingerPoint, BollingerState]:
    """Slide the Bollinger window forward by one bar.

    Mean and squared deviations are updated in constant time (Welford's
    sliding form). Once every ``period`` updates the window has fully turned
    over and both are summed again exactly, which bounds rounding drift
    without growing the per-bar cost.

    :param state: State from :func:`bollinger_checkpoint` or a previous update.
    :param bar: Next bar.
    :returns: The new point and the state for the following bar.
    :raises DataValidationError: If ``bar`` is malformed or out of order.
    """
    validate_next_bar(bar, state.timestamp)
    period = state.period
    oldest = state.window[0]
    close = bar.close
    window = state.window[1:] + (close,)

    if close == state.window[-1]:
        flat_run = min(state.flat_run + 1, period)
    else:
        flat_run = 1

    steps = state.steps + 1
    if flat_run >= period:
        # A constant window has exactly zero width.
        mean, m2, steps = close, 0.0, 0
    elif steps >= period:
        mean, m2 = _window_moments(window)
        steps = 0
    else:
        delta = close - oldest
        mean = state.mean + delta / period
        m2 = max(state.m2 + delta * (close - mean + oldest - state.mean), 0.0)

    new_state = BollingerState(
        period=period,
        standard_deviations=state.standard_deviations,
        timestamp=bar.timestamp,
        window=window,
        mean=mean,
        m2=m2,
        flat_run=flat_run,
        steps=steps,
    )
    sigma = math.sqrt(m2 / period)
    return _bands(bar.timestamp, mean, sigma, state.standard_deviations), new_state
