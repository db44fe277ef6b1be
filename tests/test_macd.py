"""Tests for the MACD calculator."""

import pytest

from ta_engine.exceptions import ConfigError
from ta_engine.indicators.macd import calculate_macd, macd_warmup
from ta_engine.indicators.moving_averages import calculate_ema
from ta_engine.types import MACDConfig


def _reference_ema(values: list[float], period: int) -> list[float]:
    alpha = 2 / (period + 1)
    result = [sum(values[:period]) / period]
    for value in values[period:]:
        result.append((value - result[-1]) * alpha + result[-1])
    return result


class TestCalculateMACD:
    """Tests for calculate_macd."""

    def test_warmup_and_length(self, walk_bars) -> None:
        macd = calculate_macd(walk_bars)

        assert macd_warmup(MACDConfig()) == 34
        assert len(macd) == len(walk_bars) - 34 + 1
        assert macd[0].timestamp == walk_bars[33].timestamp
        assert macd[-1].timestamp == walk_bars[-1].timestamp

    def test_insufficient_data_returns_empty(self, walk_bars) -> None:
        assert calculate_macd(walk_bars[:33]) == []
        assert len(calculate_macd(walk_bars[:34])) == 1

    def test_histogram_is_exact_difference(self, walk_bars) -> None:
        for point in calculate_macd(walk_bars):
            assert point.histogram == point.macd - point.signal

    def test_macd_line_is_ema_difference(self, walk_bars) -> None:
        fast = {p.timestamp: p.value for p in calculate_ema(walk_bars, 12)}
        slow = {p.timestamp: p.value for p in calculate_ema(walk_bars, 26)}

        for point in calculate_macd(walk_bars):
            assert point.macd == pytest.approx(fast[point.timestamp] - slow[point.timestamp])

    def test_signal_line_matches_reference(self, walk_bars) -> None:
        config = MACDConfig(fast_period=3, slow_period=6, signal_period=4)
        closes = [b.close for b in walk_bars]
        fast = _reference_ema(closes, 3)[3:]  # align with slow EMA start
        slow = _reference_ema(closes, 6)
        line = [f - s for f, s in zip(fast, slow)]
        signal = _reference_ema(line, 4)

        macd = calculate_macd(walk_bars, config)

        assert len(macd) == len(signal)
        assert [p.macd for p in macd] == pytest.approx(line[3:], rel=1e-9, abs=1e-9)
        assert [p.signal for p in macd] == pytest.approx(signal, rel=1e-9, abs=1e-9)

    def test_flat_series_is_zero(self, bar_factory) -> None:
        macd = calculate_macd(bar_factory([50.0] * 40))

        assert len(macd) == 7
        for point in macd:
            assert point.macd == 0.0
            assert point.signal == 0.0
            assert point.histogram == 0.0

    def test_rising_series_is_positive(self, bar_factory) -> None:
        """A steady uptrend keeps the fast EMA above the slow EMA."""
        macd = calculate_macd(bar_factory([100.0 + i for i in range(60)]))
        assert all(p.macd > 0 for p in macd)

    def test_invalid_config_raises(self) -> None:
        with pytest.raises(ConfigError):
            MACDConfig(fast_period=26, slow_period=12)
