"""Tests for the Bollinger Bands calculator."""

import statistics

import pytest

from ta_engine.indicators.bollinger import calculate_bollinger_bands
from ta_engine.indicators.moving_averages import calculate_sma
from ta_engine.types import BollingerConfig


class TestCalculateBollingerBands:
    """Tests for calculate_bollinger_bands."""

    def test_flat_series_has_zero_bandwidth(self, bar_factory) -> None:
        bands = calculate_bollinger_bands(bar_factory([100.0] * 25))

        assert len(bands) == 6
        for point in bands:
            assert point.bandwidth == 0.0
            assert point.upper == point.middle == point.lower == 100.0

    def test_flat_series_with_inexact_price(self, bar_factory) -> None:
        """A constant window has zero width even when the price is not exact in binary."""
        bands = calculate_bollinger_bands(bar_factory([100.1] * 21))
        assert all(p.bandwidth == 0.0 for p in bands)

    def test_band_ordering_and_bandwidth(self, walk_bars) -> None:
        for point in calculate_bollinger_bands(walk_bars):
            assert point.upper >= point.middle >= point.lower
            assert point.bandwidth == point.upper - point.lower

    def test_middle_band_is_sma(self, walk_bars) -> None:
        bands = calculate_bollinger_bands(walk_bars)
        sma = calculate_sma(walk_bars, 20)

        assert [p.middle for p in bands] == [p.value for p in sma]
        assert [p.timestamp for p in bands] == [p.timestamp for p in sma]

    def test_uses_population_standard_deviation(self, walk_bars) -> None:
        bands = calculate_bollinger_bands(walk_bars)
        window = [b.close for b in walk_bars[:20]]
        sigma = statistics.pstdev(window)

        assert bands[0].upper == pytest.approx(bands[0].middle + 2 * sigma, rel=1e-12)
        assert bands[0].lower == pytest.approx(bands[0].middle - 2 * sigma, rel=1e-12)

    def test_known_window(self, bar_factory) -> None:
        """Window [2, 4, 4, 4, 5, 5, 7, 9] has mean 5 and population std 2."""
        bands = calculate_bollinger_bands(
            bar_factory([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]),
            BollingerConfig(period=8, standard_deviations=1.5),
        )

        assert len(bands) == 1
        assert bands[0].middle == pytest.approx(5.0)
        assert bands[0].upper == pytest.approx(8.0)
        assert bands[0].lower == pytest.approx(2.0)
        assert bands[0].bandwidth == pytest.approx(6.0)

    def test_width_scales_with_k(self, walk_bars) -> None:
        narrow = calculate_bollinger_bands(walk_bars, BollingerConfig(standard_deviations=1))
        wide = calculate_bollinger_bands(walk_bars, BollingerConfig(standard_deviations=3))

        for n, w in zip(narrow, wide):
            assert w.bandwidth == pytest.approx(3 * n.bandwidth)

    def test_insufficient_data_returns_empty(self, bar_factory) -> None:
        assert calculate_bollinger_bands(bar_factory([100.0] * 19)) == []

    def test_length(self, walk_bars) -> None:
        bands = calculate_bollinger_bands(walk_bars, BollingerConfig(period=10))
        assert len(bands) == len(walk_bars) - 9
