"""Signal classification over point-in-time indicator values.

Every function here is stateless; MACD crossovers need the previous bar's
values to be passed in explicitly.
"""

from __future__ import annotations

import math

from ta_engine.exceptions import DataValidationError
from ta_engine.types import (BollingerSignal, Crossover, IndicatorResult,
                             MACDSignal, RSISignal, SignalSummary, TrendSignal,
                             ZoneSignal)

RSI_OVERBOUGHT = 70.0
RSI_OVERSOLD = 30.0


def _require_finite(**values: float | None) -> None:
    for name, value in values.items():
        if value is not None and not math.isfinite(value):
            raise DataValidationError(f"'{name}' must be finite, got {value}")


def get_rsi_signal(rsi: float) -> RSISignal:
    """Classify an RSI value.

    :param rsi: RSI value, normally in [0, 100].
    :returns: Overbought at or above 70, oversold at or below 30, otherwise
        neutral. Strength grows linearly to 1 at the 0/100 extremes.
    """
    _require_finite(rsi=rsi)
    if rsi >= RSI_OVERBOUGHT:
        strength = min((rsi - RSI_OVERBOUGHT) / 30, 1.0)
        return RSISignal(signal=ZoneSignal.OVERBOUGHT, strength=strength)
    if rsi <= RSI_OVERSOLD:
        strength = min((RSI_OVERSOLD - rsi) / 30, 1.0)
        return RSISignal(signal=ZoneSignal.OVERSOLD, strength=strength)
    return RSISignal(signal=ZoneSignal.NEUTRAL, strength=0.0)


def get_macd_signal(
    macd: float,
    signal: float,
    previous_macd: float | None = None,
    previous_signal: float | None = None,
) -> MACDSignal:
    """Classify MACD direction and detect a signal-line crossover.

    :param macd: Current MACD line value.
    :param signal: Current signal line value.
    :param previous_macd: MACD line value on the previous bar.
    :param previous_signal: Signal line value on the previous bar.
    :returns: Direction of the histogram, plus the crossover direction when the
        histogram changed sign since the previous bar (None without previous
        data or without a sign change).
    """
    _require_finite(
        macd=macd,
        signal=signal,
        previous_macd=previous_macd,
        previous_signal=previous_signal,
    )
    histogram = macd - signal

    crossover = None
    if previous_macd is not None and previous_signal is not None:
        previous_histogram = previous_macd - previous_signal
        if previous_histogram < 0 and histogram > 0:
            crossover = Crossover.BULLISH
        elif previous_histogram > 0 and histogram < 0:
            crossover = Crossover.BEARISH

    if histogram > 0:
        direction = TrendSignal.BULLISH
    elif histogram < 0:
        direction = TrendSignal.BEARISH
    else:
        direction = TrendSignal.NEUTRAL
    return MACDSignal(signal=direction, crossover=crossover)


def get_bollinger_signal(
    price: float, upper: float, middle: float, lower: float
) -> BollingerSignal:
    """Classify a price against Bollinger Bands.

    ``percent_b`` is 0 at the lower band and 1 at the upper band; it is not
    clamped. Zero-width bands give 0.5 at the band, 1.0 above and 0.0 below.

    :param price: Price to classify, usually the latest close.
    :param upper: Upper band.
    :param middle: Middle band (unused by the classification).
    :param lower: Lower band.
    """
    _require_finite(price=price, upper=upper, middle=middle, lower=lower)
    width = upper - lower
    if width > 0:
        percent_b = (price - lower) / width
    elif price > upper:
        percent_b = 1.0
    elif price < lower:
        percent_b = 0.0
    else:
        percent_b = 0.5

    if price > upper:
        zone = ZoneSignal.OVERBOUGHT
    elif price < lower:
        zone = ZoneSignal.OVERSOLD
    else:
        zone = ZoneSignal.NEUTRAL
    return BollingerSignal(signal=zone, percent_b=percent_b)


def summarize_signals(result: IndicatorResult, price: float) -> SignalSummary:
    """Classify the latest values of an engine result.

    :param result: Output of :func:`ta_engine.engine.compute_indicators`.
    :param price: Price to compare with the Bollinger Bands (latest close).
    :returns: One signal per indicator that has at least one point.
    """
    rsi = get_rsi_signal(result.rsi[-1].value) if result.rsi else None

    macd = None
    if result.macd:
        latest = result.macd[-1]
        previous = result.macd[-2] if len(result.macd) > 1 else None
        macd = get_macd_signal(
            latest.macd,
            latest.signal,
            previous.macd if previous else None,
            previous.signal if previous else None,
        )

    bollinger = None
    if result.bollinger:
        bands = result.bollinger[-1]
        bollinger = get_bollinger_signal(price, bands.upper, bands.middle, bands.lower)

    timestamps = [
        series[-1].timestamp
        for series in (result.rsi, result.macd, result.bollinger)
        if series
    ]
    return SignalSummary(
        timestamp=max(timestamps) if timestamps else None,
        rsi=rsi,
        macd=macd,
        bollinger=bollinger,
    )
