"""Shared fixtures for indicator engine tests."""

from __future__ import annotations

from typing import Callable

import numpy as np
import pytest

from ta_engine.types import Bar

BASE_TS = 1_704_067_200_000  # 2024-01-01T00:00:00Z in epoch ms
DAY_MS = 86_400_000


def make_bars(closes: list[float], start_ts: int = BASE_TS) -> list[Bar]:
    """Build daily bars whose open/high/low bracket the given closes."""
    bars = []
    previous = closes[0] if closes else 0.0
    for i, close in enumerate(closes):
        open_ = previous
        bars.append(
            Bar(
                timestamp=start_ts + i * DAY_MS,
                open=open_,
                high=max(open_, close) + 0.5,
                low=min(open_, close) - 0.5,
                close=close,
                volume=1000.0 + i,
            )
        )
        previous = close
    return bars


def random_walk_closes(n: int, seed: int = 7, start: float = 100.0) -> list[float]:
    """Random-walk closes that stay well above zero."""
    rng = np.random.default_rng(seed)
    steps = rng.normal(0.0, 1.0, size=n)
    closes = start + np.cumsum(steps)
    return [float(c) for c in np.maximum(closes, 5.0)]


@pytest.fixture
def bar_factory() -> Callable[..., list[Bar]]:
    """Factory building bars from a list of closes."""
    return make_bars


@pytest.fixture
def walk_bars() -> list[Bar]:
    """300 bars of a seeded random walk."""
    return make_bars(random_walk_closes(300))


@pytest.fixture
def sample_closes() -> list[float]:
    return [100, 102, 101, 105, 107, 103, 110, 108, 112, 115]
