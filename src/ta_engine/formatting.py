"""Rounding of engine results for display.

Charts show prices with two decimals and MACD fields with four. Rounding is
applied to a copy of the result; derived fields are recomputed from the rounded
inputs so ``bandwidth == upper - lower`` and ``histogram == macd - signal``
still hold to the displayed precision.
"""

from __future__ import annotations

from ta_engine.types import (BollingerPoint, IndicatorPoint, IndicatorResult,
                             MACDPoint, RSIPoint)

DEFAULT_PRECISION = 2
DEFAULT_MACD_PRECISION = 4


def _round_series(points: list[IndicatorPoint], precision: int) -> list[IndicatorPoint]:
    return [
        IndicatorPoint(timestamp=p.timestamp, value=round(p.value, precision))
        for p in points
    ]


def round_result(
    result: IndicatorResult,
    precision: int = DEFAULT_PRECISION,
    macd_precision: int = DEFAULT_MACD_PRECISION,
) -> IndicatorResult:
    """Return a copy of ``result`` rounded for presentation.

    :param result: Full-precision engine output.
    :param precision: Decimals for moving averages, RSI and Bollinger Bands.
    :param macd_precision: Decimals for MACD fields.
    """
    rsi = [
        RSIPoint(
            timestamp=p.timestamp,
            value=round(p.value, precision),
            overbought=p.overbought,
            oversold=p.oversold,
        )
        for p in result.rsi
    ]

    macd = []
    for p in result.macd:
        line = round(p.macd, macd_precision)
        signal = round(p.signal, macd_precision)
        macd.append(
            MACDPoint(
                timestamp=p.timestamp,
                macd=line,
                signal=signal,
                histogram=round(line - signal, macd_precision),
            )
        )

    bollinger = []
    for p in result.bollinger:
        upper = round(p.upper, precision)
        lower = round(p.lower, precision)
        bollinger.append(
            BollingerPoint(
                timestamp=p.timestamp,
                upper=upper,
                middle=round(p.middle, precision),
                lower=lower,
                bandwidth=round(upper - lower, precision),
            )
        )

    return IndicatorResult(
        rsi=rsi,
        macd=macd,
        bollinger=bollinger,
        sma={period: _round_series(s, precision) for period, s in result.sma.items()},
        ema={period: _round_series(s, precision) for period, s in result.ema.items()},
    )
