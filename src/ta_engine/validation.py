"""Bar series validation.

Batch calls validate the whole sequence once; incremental updates validate
only the appended bar against the previous tail.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Sequence

from ta_engine.exceptions import DataValidationError

if TYPE_CHECKING:
    from ta_engine.types import Bar


def _check_bar(bar: Bar, where: str) -> None:
    """Check a single bar's values and OHLC consistency.

    :param bar: Bar to check.
    :param where: Position description used in error messages.
    :raises DataValidationError: If the bar is malformed.
    """
    for field in ("open", "high", "low", "close", "volume"):
        value = getattr(bar, field)
        if not math.isfinite(value):
            raise DataValidationError(f"{where}: '{field}' is not finite ({value})")

    if bar.open <= 0 or bar.close <= 0:
        raise DataValidationError(f"{where}: open and close must be positive")
    if bar.low < 0:
        raise DataValidationError(f"{where}: low must be non-negative")
    if bar.volume < 0:
        raise DataValidationError(f"{where}: volume must be non-negative")
    if bar.high < max(bar.open, bar.close):
        raise DataValidationError(
            f"{where}: high {bar.high} is below max(open, close)"
        )
    if bar.low > min(bar.open, bar.close):
        raise DataValidationError(
            f"{where}: low {bar.low} is above min(open, close)"
        )


def validate_bars(bars: Sequence[Bar]) -> Sequence[Bar]:
    """Validate a bar sequence before any calculation runs.

    :param bars: Time-ordered bars.
    :returns: The same sequence, unchanged.
    :raises DataValidationError: If timestamps are not strictly increasing or a
        bar violates the OHLC invariant.
    """
    previous_ts: int | None = None
    for i, bar in enumerate(bars):
        _check_bar(bar, f"bar {i}")
        if previous_ts is not None and bar.timestamp <= previous_ts:
            raise DataValidationError(
                f"bar {i}: timestamp {bar.timestamp} is not after {previous_ts}"
            )
        previous_ts = bar.timestamp
    return bars


def validate_next_bar(bar: Bar, previous_timestamp: int) -> Bar:
    """Validate a bar appended to an already-validated series.

    :param bar: New bar.
    :param previous_timestamp: Timestamp of the current tail of the series.
    :returns: The bar, unchanged.
    :raises DataValidationError: If the bar is malformed or out of order.
    """
    _check_bar(bar, f"bar at {bar.timestamp}")
    if bar.timestamp <= previous_timestamp:
        raise DataValidationError(
            f"bar at {bar.timestamp}: timestamp is not after {previous_timestamp}"
        )
    return bar
