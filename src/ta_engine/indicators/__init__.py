"""Indicator calculators (batch and incremental)."""

from ta_engine.indicators.bollinger import (bollinger_checkpoint,
                                            calculate_bollinger_bands,
                                            update_bollinger_bands)
from ta_engine.indicators.macd import (calculate_macd, macd_checkpoint,
                                       update_macd)
from ta_engine.indicators.moving_averages import (calculate_ema,
                                                  calculate_ema_periods,
                                                  calculate_sma,
                                                  calculate_sma_periods,
                                                  ema_checkpoint, update_ema)
from ta_engine.indicators.rsi import calculate_rsi, rsi_checkpoint, update_rsi

__all__ = [
    "calculate_sma",
    "calculate_ema",
    "calculate_sma_periods",
    "calculate_ema_periods",
    "ema_checkpoint",
    "update_ema",
    "calculate_rsi",
    "rsi_checkpoint",
    "update_rsi",
    "calculate_macd",
    "macd_checkpoint",
    "update_macd",
    "calculate_bollinger_bands",
    "bollinger_checkpoint",
    "update_bollinger_bands",
]
