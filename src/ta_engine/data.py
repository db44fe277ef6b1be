"""Reading bar sequences from CSV files."""

from __future__ import annotations

import csv
from datetime import datetime, timezone
from pathlib import Path

from ta_engine.exceptions import DataSourceError
from ta_engine.types import Bar


def parse_timestamp(value: str) -> int:
    """Parse epoch milliseconds or an ISO-8601 datetime into epoch milliseconds.

    Epoch values written as floats (``1704067200000.0``, as spreadsheets export
    them) are accepted when they have no fractional part. Naive datetimes are
    taken as UTC.

    :raises DataSourceError: If the value is neither.
    """
    value = value.strip()
    try:
        return int(value)
    except ValueError:
        pass

    try:
        number = float(value)
    except ValueError:
        number = None
    if number is not None:
        if not number.is_integer():
            raise DataSourceError(
                f"Failed to parse timestamp '{value}': epoch milliseconds must be whole"
            )
        return int(number)

    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise DataSourceError(f"Failed to parse timestamp '{value}': {e}") from e
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def load_bars_csv(file_path: str | Path, delimiter: str = ",") -> list[Bar]:
    """Read bars from a CSV file.

    Expected columns: ``timestamp``, ``open``, ``high``, ``low``, ``close`` and
    optionally ``volume``. Rows are returned in file order; ordering and OHLC
    consistency are checked later by the validator.

    :param file_path: Path to the CSV file.
    :param delimiter: CSV delimiter.
    :returns: Bars in file order.
    :raises DataSourceError: If the file cannot be read or a row is malformed.
    """
    path = Path(file_path)
    if not path.exists():
        raise DataSourceError(f"CSV file not found: {file_path}")

    bars = []
    try:
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f, delimiter=delimiter)
            for line_no, row in enumerate(reader, start=2):
                ts_str = row.get("timestamp")
                if not ts_str:
                    raise DataSourceError(f"Line {line_no}: missing timestamp")
                try:
                    bars.append(
                        Bar(
                            timestamp=parse_timestamp(ts_str),
                            open=float(row["open"]),
                            high=float(row["high"]),
                            low=float(row["low"]),
                            close=float(row["close"]),
                            volume=float(row.get("volume") or 0.0),
                        )
                    )
                except (KeyError, TypeError, ValueError) as e:
                    raise DataSourceError(
                        f"Line {line_no}: failed to parse row {row}: {e}"
                    ) from e
    except csv.Error as e:
        raise DataSourceError(f"CSV parsing error: {e}") from e
    except OSError as e:
        raise DataSourceError(f"Failed to read CSV file: {e}") from e

    return bars
