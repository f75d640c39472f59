"""
Tests for timestamp helpers.
"""

from datetime import datetime

import pytest

from app.core.clock import parse_timestamp, utc_today


@pytest.mark.unit
class TestParseTimestamp:
    """Supabase timestamps are normalised to naive UTC."""

    def test_zulu_suffix(self) -> None:
        assert parse_timestamp("2026-01-02T03:04:05Z") == datetime(2026, 1, 2, 3, 4, 5)

    def test_offset_is_converted_to_utc(self) -> None:
        assert parse_timestamp("2026-01-02T03:04:05+02:00") == datetime(2026, 1, 2, 1, 4, 5)

    def test_naive_string_is_kept(self) -> None:
        assert parse_timestamp("2026-01-02T03:04:05") == datetime(2026, 1, 2, 3, 4, 5)

    def test_datetime_passes_through(self) -> None:
        value = datetime(2026, 5, 1, 8, 0)
        assert parse_timestamp(value) == value

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_values(self, value) -> None:
        assert parse_timestamp(value) is None

    def test_today_is_iso_date(self) -> None:
        today = utc_today()
        assert len(today) == 10
        assert datetime.strptime(today, "%Y-%m-%d")
