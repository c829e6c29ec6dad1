"""
CONFIG VALUE PARSING TESTS
"""
from datetime import datetime, timezone

import pytest

from autonomy.config_values import (
    format_list,
    format_number,
    format_timestamp,
    parse_bool,
    parse_int,
    parse_list,
    parse_number,
    parse_timestamp,
)
from exceptions import CorruptConfigValue


class TestParsing:

    @pytest.mark.parametrize("raw,expected", [
        ("true", True), ("TRUE", True), (" false ", False), (None, True), ("", True),
    ])
    def test_parse_bool(self, raw, expected):
        assert parse_bool("k", raw, True) is expected

    @pytest.mark.parametrize("raw", ["yes", "1", "on"])
    def test_parse_bool_rejects_loose_values(self, raw):
        with pytest.raises(CorruptConfigValue) as exc:
            parse_bool("agent.autonomous_mode", raw, False)
        assert exc.value.details == {"key": "agent.autonomous_mode", "reason": "expected true or false"}

    def test_parse_number(self):
        assert parse_number("k", "7.5", 5.0) == 7.5
        assert parse_number("k", None, 5.0) == 5.0

    @pytest.mark.parametrize("raw", ["abc", "inf", "nan"])
    def test_parse_number_rejects(self, raw):
        with pytest.raises(CorruptConfigValue):
            parse_number("k", raw, 0.0)

    def test_parse_int(self):
        assert parse_int("k", "10000000", 0) == 10_000_000
        assert parse_int("k", "10.0", 0) == 10
        with pytest.raises(CorruptConfigValue):
            parse_int("k", "10.5", 0)

    def test_parse_list(self):
        assert parse_list("resize, storage-class,,", ()) == ["resize", "storage-class"]
        assert parse_list(None, ("resize",)) == ["resize"]
        assert parse_list("  ", ("resize",)) == ["resize"]

    def test_parse_timestamp(self):
        assert parse_timestamp("k", None) is None
        assert parse_timestamp("k", "2026-03-01T12:00:00+00:00") == datetime(2026, 3, 1, 12, tzinfo=timezone.utc)
        # naive values are taken as UTC
        assert parse_timestamp("k", "2026-03-01T12:00:00").tzinfo == timezone.utc
        with pytest.raises(CorruptConfigValue):
            parse_timestamp("k", "yesterday")


class TestFormatting:

    def test_format_number(self):
        assert format_number(7.5) == "7.5"
        assert format_number(5) == "5"

    def test_format_list_is_sorted(self):
        assert format_list({"storage-class", "resize"}) == "resize,storage-class"

    def test_format_timestamp_round_trips(self):
        moment = datetime(2026, 3, 1, 12, 0, 30, tzinfo=timezone.utc)
        assert parse_timestamp("k", format_timestamp(moment)) == moment
