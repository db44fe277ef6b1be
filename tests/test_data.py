"""Tests for the CSV bar loader."""

from pathlib import Path

import pytest

from ta_engine.data import load_bars_csv, parse_timestamp
from ta_engine.exceptions import DataSourceError

BASE_TS = 1_704_067_200_000
DAY_MS = 86_400_000


class TestParseTimestamp:
    """Tests for timestamp parsing."""

    def test_epoch_milliseconds(self) -> None:
        assert parse_timestamp("1704067200000") == BASE_TS

    def test_iso_with_offset(self) -> None:
        assert parse_timestamp("2024-01-01T00:00:00+00:00") == BASE_TS

    def test_iso_with_z_suffix(self) -> None:
        assert parse_timestamp("2024-01-01T00:00:00Z") == BASE_TS

    def test_naive_iso_is_utc(self) -> None:
        assert parse_timestamp("2024-01-02") == BASE_TS + DAY_MS

    def test_non_utc_offset(self) -> None:
        assert parse_timestamp("2024-01-01T02:00:00+02:00") == BASE_TS

    def test_float_formatted_epoch(self) -> None:
        assert parse_timestamp("1704067200000.0") == BASE_TS
        assert parse_timestamp(" 1704067200000.000 ") == BASE_TS

    @pytest.mark.parametrize("value", ["1704067200000.5", "nan", "inf"])
    def test_non_whole_epoch_raises(self, value: str) -> None:
        with pytest.raises(DataSourceError, match="Failed to parse timestamp"):
            parse_timestamp(value)

    def test_invalid_raises(self) -> None:
        with pytest.raises(DataSourceError, match="Failed to parse timestamp"):
            parse_timestamp("not-a-date")


class TestLoadBarsCSV:
    """Tests for load_bars_csv."""

    def test_load_bars(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "bars.csv"
        csv_file.write_text(
            "timestamp,open,high,low,close,volume\n"
            "2024-01-01T00:00:00Z,150.0,155.0,148.0,153.0,1000\n"
            "2024-01-02T00:00:00Z,153.0,156.0,152.0,155.0,1200\n"
        )

        bars = load_bars_csv(csv_file)

        assert len(bars) == 2
        assert bars[0].timestamp == BASE_TS
        assert bars[0].open == 150.0
        assert bars[1].close == 155.0
        assert bars[1].volume == 1200.0

    def test_spreadsheet_epoch_export(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "bars.csv"
        csv_file.write_text(
            "timestamp,open,high,low,close,volume\n"
            "1704067200000.0,10,11,9,10.5,100.0\n"
            "1704153600000.0,10.5,12,10,11.5,120.0\n"
        )

        bars = load_bars_csv(csv_file)
        assert [b.timestamp for b in bars] == [BASE_TS, BASE_TS + DAY_MS]

    def test_volume_is_optional(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "bars.csv"
        csv_file.write_text("timestamp,open,high,low,close\n1704067200000,10,11,9,10.5\n")

        bars = load_bars_csv(csv_file)
        assert bars[0].volume == 0.0

    def test_custom_delimiter(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "bars.csv"
        csv_file.write_text("timestamp;open;high;low;close\n1704067200000;10;11;9;10.5\n")

        bars = load_bars_csv(csv_file, delimiter=";")
        assert bars[0].high == 11.0

    def test_rows_kept_in_file_order(self, tmp_path: Path) -> None:
        """Ordering is checked by the validator, not the loader."""
        csv_file = tmp_path / "bars.csv"
        csv_file.write_text(
            "timestamp,open,high,low,close\n"
            "1704153600000,10,11,9,10\n"
            "1704067200000,10,11,9,10\n"
        )

        bars = load_bars_csv(csv_file)
        assert [b.timestamp for b in bars] == [BASE_TS + DAY_MS, BASE_TS]

    def test_header_only_gives_no_bars(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "bars.csv"
        csv_file.write_text("timestamp,open,high,low,close,volume\n")

        assert load_bars_csv(csv_file) == []

    def test_file_not_found(self) -> None:
        with pytest.raises(DataSourceError, match="not found"):
            load_bars_csv("/nonexistent/bars.csv")

    def test_missing_timestamp(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "bars.csv"
        csv_file.write_text("timestamp,open,high,low,close\n,10,11,9,10\n")

        with pytest.raises(DataSourceError, match="Line 2: missing timestamp"):
            load_bars_csv(csv_file)

    def test_bad_number(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "bars.csv"
        csv_file.write_text(
            "timestamp,open,high,low,close\n"
            "1704067200000,10,11,9,10\n"
            "1704153600000,10,eleven,9,10\n"
        )

        with pytest.raises(DataSourceError, match="Line 3: failed to parse row"):
            load_bars_csv(csv_file)

    def test_missing_column(self, tmp_path: Path) -> None:
        csv_file = tmp_path / "bars.csv"
        csv_file.write_text("timestamp,open,high,low\n1704067200000,10,11,9\n")

        with pytest.raises(DataSourceError, match="failed to parse row"):
            load_bars_csv(csv_file)
