"""
Tests for time normalization.
"""

from datetime import date, datetime, timedelta, timezone

import pytest
from notion_digest.utils.timeutil import (
    add_minutes,
    day_bounds,
    format_display,
    notion_date_payload,
    parse_absolute,
    to_canonical,
    to_date_only,
    to_local_string,
)


class TestToCanonical:
    """Test suite for to_canonical."""

    def test_wall_clock_string_is_labeled_not_converted(self):
        assert to_canonical("2025-09-08 19:00") == "2025-09-08T19:00:00+09:00"

    def test_slash_and_t_separators(self):
        assert to_canonical("2025/09/08 19:00") == "2025-09-08T19:00:00+09:00"
        assert to_canonical("2025-09-08T19:00") == "2025-09-08T19:00:00+09:00"

    def test_date_only_is_midnight(self):
        assert to_canonical("2025-09-08") == "2025-09-08T00:00:00+09:00"
        assert to_canonical("2025/09/08") == "2025-09-08T00:00:00+09:00"

    def test_utc_marker_is_converted(self):
        assert to_canonical("2025-09-08T10:00:00Z") == "2025-09-08T19:00:00+09:00"

    @pytest.mark.parametrize("value", [
        "2025-09-08T12:00:00+02:00",
        "2025-09-08T12:00:00+0200",
        "2025-09-08 12:00+02:00",
    ])
    def test_numeric_offsets_are_converted(self, value):
        assert to_canonical(value) == "2025-09-08T19:00:00+09:00"

    def test_offset_crossing_midnight(self):
        assert to_canonical("2025-09-08T20:30:00Z") == "2025-09-09T05:30:00+09:00"

    def test_surrounding_whitespace_is_ignored(self):
        assert to_canonical("  2025-09-08 19:00 \n") == "2025-09-08T19:00:00+09:00"

    def test_aware_datetime(self):
        value = datetime(2025, 9, 8, 10, 0, tzinfo=timezone.utc)
        assert to_canonical(value) == "2025-09-08T19:00:00+09:00"

    def test_naive_datetime_is_tokyo_wall_clock(self):
        assert to_canonical(datetime(2025, 9, 8, 19, 0, 30)) == "2025-09-08T19:00:30+09:00"

    def test_date_object(self):
        assert to_canonical(date(2025, 9, 8)) == "2025-09-08T00:00:00+09:00"

    def test_seconds_precision(self):
        value = datetime(2025, 9, 8, 19, 0, 30, 999999, tzinfo=timezone(timedelta(hours=9)))
        assert to_canonical(value) == "2025-09-08T19:00:30+09:00"

    def test_other_formats_use_generic_parse(self):
        assert to_canonical("2025-09-08T19:00:15") == "2025-09-08T19:00:15+09:00"
        assert to_canonical("Sep 8 2025 7:00 PM") == "2025-09-08T19:00:00+09:00"

    @pytest.mark.parametrize("value", [None, 42, 3.5, ["2025-09-08"]])
    def test_non_dates_fall_back_to_now(self, value):
        before = datetime.now(timezone.utc).replace(microsecond=0)
        result = to_canonical(value)
        after = datetime.now(timezone.utc) + timedelta(seconds=1)

        assert result.endswith("+09:00")
        assert before <= parse_absolute(result) <= after

    def test_unrecognizable_string_raises(self):
        with pytest.raises(ValueError):
            to_canonical("nonsense")

    @pytest.mark.parametrize("instant", [
        datetime(2025, 9, 8, 10, 0, tzinfo=timezone.utc),
        datetime(2024, 2, 29, 23, 59, 59, tzinfo=timezone(timedelta(hours=-5))),
        datetime(2025, 1, 1, 0, 0, tzinfo=timezone(timedelta(hours=5, minutes=30))),
    ])
    def test_round_trip_preserves_instant(self, instant):
        assert parse_absolute(to_canonical(instant)) == instant
        assert parse_absolute(to_canonical(instant.isoformat())) == instant

    def test_never_renders_z(self):
        assert not to_canonical("2025-09-08T00:00:00Z").endswith("Z")


class TestArithmetic:
    """Test suite for minute arithmetic and day bounds."""

    def test_add_one_minute(self):
        assert add_minutes("2025-09-08T19:00:00+09:00", 1) == "2025-09-08T19:01:00+09:00"

    def test_add_minutes_across_day(self):
        assert add_minutes("2025-09-08T23:59:30+09:00", 1) == "2025-09-09T00:00:30+09:00"

    def test_subtract_minutes(self):
        assert add_minutes("2025-09-08T00:00:00+09:00", -1) == "2025-09-07T23:59:00+09:00"

    def test_add_minutes_to_other_offset(self):
        assert add_minutes("2025-09-08T10:00:00Z", 1) == "2025-09-08T19:01:00+09:00"

    def test_day_bounds_for_date(self):
        assert day_bounds(date(2025, 9, 8)) == ("2025-09-08T00:00:00+09:00", "2025-09-09T00:00:00+09:00")

    def test_day_bounds_uses_tokyo_day(self):
        # 16:00 UTC is already the next day in Tokyo
        instant = datetime(2025, 9, 8, 16, 0, tzinfo=timezone.utc)
        assert day_bounds(instant)[0] == "2025-09-09T00:00:00+09:00"


class TestDisplay:
    """Test suite for display helpers."""

    def test_format_display_converts_to_tokyo(self):
        assert format_display("2025-09-08T10:05:00.000Z") == "2025/09/08 19:05"
        assert format_display("2025-09-08T19:05:00.000+09:00") == "2025/09/08 19:05"

    def test_local_and_date_only_strings(self):
        assert to_local_string("2025-09-08T10:00:00Z") == "2025-09-08T19:00:00"
        assert to_date_only("2025/09/08 23:00") == "2025-09-08"

    def test_notion_date_payload_scalar(self):
        assert notion_date_payload("2025-09-08 19:00") == {
            "start": "2025-09-08T19:00:00",
            "time_zone": "Asia/Tokyo",
        }

    def test_notion_date_payload_keeps_date_only(self):
        assert notion_date_payload("2025-09-08") == {"start": "2025-09-08", "time_zone": "Asia/Tokyo"}

    def test_notion_date_payload_range(self):
        payload = notion_date_payload({"start": "2025-09-08 19:00", "end": "2025-09-08 19:45"})
        assert payload == {
            "start": "2025-09-08T19:00:00",
            "end": "2025-09-08T19:45:00",
            "time_zone": "Asia/Tokyo",
        }

    def test_notion_date_payload_empty(self):
        assert notion_date_payload(None) is None
        assert notion_date_payload("") is None
