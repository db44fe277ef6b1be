"""Batch entry point that computes every requested indicator in one call."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from ta_engine.indicators.bollinger import bollinger_points
from ta_engine.indicators.macd import macd_points
from ta_engine.indicators.moving_averages import (closes_of, ema_points,
                                                  sma_points)
from ta_engine.indicators.rsi import rsi_points
from ta_engine.types import IndicatorConfig, IndicatorKind, IndicatorResult
from ta_engine.validation import validate_bars

if TYPE_CHECKING:
    from ta_engine.types import Bar

logger = logging.getLogger(__name__)


def compute_indicators(
    bars: Sequence[Bar], config: IndicatorConfig | None = None
) -> IndicatorResult:
    """Compute all indicators requested by ``config`` over ``bars``.

    Bars are validated once up front. Each indicator is computed independently,
    so one lacking history comes back empty while the others still fill in.

    :param bars: Time-ordered bars.
    :param config: Engine configuration; defaults request every indicator.
    :returns: Indicator sequences keyed by indicator.
    :raises DataValidationError: If ``bars`` is malformed.
    """
    config = config or IndicatorConfig()
    validate_bars(bars)
    closes = closes_of(bars)
    logger.debug(
        "Computing %s over %d bars",
        sorted(kind.value for kind in config.indicators),
        len(bars),
    )

    fields = {}
    if config.wants(IndicatorKind.RSI):
        fields["rsi"] = rsi_points(bars, closes, config.rsi.period)
    if config.wants(IndicatorKind.MACD):
        fields["macd"] = macd_points(bars, closes, config.macd)
    if config.wants(IndicatorKind.BOLLINGER):
        fields["bollinger"] = bollinger_points(bars, closes, config.bollinger)
    if config.wants(IndicatorKind.SMA):
        fields["sma"] = {
            period: sma_points(bars, closes, period) for period in config.sma.periods
        }
    if config.wants(IndicatorKind.EMA):
        fields["ema"] = {
            period: ema_points(bars, closes, period) for period in config.ema.periods
        }

    for name, series in fields.items():
        if isinstance(series, list) and not series:
            logger.debug("Not enough bars for %s (have %d)", name, len(bars))

    return IndicatorResult(**fields)
