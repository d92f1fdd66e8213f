from __future__ import annotations

import pytest

from spat_signals.common.time_utils import (
    now_kst_string,
    parse_transmission_time_ms,
    round1,
    timing_raw_to_seconds,
    to_kst_string,
)


def test_timing_raw_to_seconds_divides_ticks_by_ten():
    assert timing_raw_to_seconds(100) == 10
    assert timing_raw_to_seconds(55) == 5.5
    assert timing_raw_to_seconds(0) == 0
    assert timing_raw_to_seconds("120") == 12.0


@pytest.mark.parametrize("raw", [None, "abc", "", "1_0", float("nan"), float("inf"), True, {"v": 1}, [1]])
def test_timing_raw_to_seconds_returns_none_for_unusable_values(raw):
    assert timing_raw_to_seconds(raw) is None


def test_parse_transmission_time_prefers_trsm_utc_time():
    rec = {"trsmUtcTime": 1705651200000, "regDt": "2020-01-01T00:00:00Z"}
    assert parse_transmission_time_ms(rec) == 1705651200000


def test_parse_transmission_time_accepts_numeric_string_primary():
    assert parse_transmission_time_ms({"trsmUtcTime": "1705651200000"}) == 1705651200000


def test_parse_transmission_time_falls_back_to_reg_dt_number():
    assert parse_transmission_time_ms({"regDt": 1705651200000}) == 1705651200000
    assert parse_transmission_time_ms({"trsmUtcTime": 0, "regDt": 1705651200000}) == 1705651200000


def test_parse_transmission_time_parses_reg_dt_iso_string():
    assert parse_transmission_time_ms({"regDt": "2024-01-19T00:00:00.000Z"}) == 1705622400000
    assert parse_transmission_time_ms({"regDt": "2024-01-19T09:00:00+09:00"}) == 1705622400000


def test_parse_transmission_time_returns_zero_sentinel():
    assert parse_transmission_time_ms({}) == 0
    assert parse_transmission_time_ms(None) == 0
    assert parse_transmission_time_ms("not a record") == 0
    assert parse_transmission_time_ms({"trsmUtcTime": -5, "regDt": "yesterday"}) == 0
    assert parse_transmission_time_ms({"regDt": 0}) == 0


def test_round1_rounds_half_away_from_zero():
    assert round1(7.25) == 7.3
    assert round1(12.0) == 12.0
    assert round1(6.94) == 6.9


def test_to_kst_string_shifts_nine_hours_with_millis():
    assert to_kst_string(1705651200000) == "2024-01-19 17:00:00.000"
    assert to_kst_string(1705651200123) == "2024-01-19 17:00:00.123"
    assert to_kst_string(1705651200123, with_ms=False) == "2024-01-19 17:00:00"


def test_to_kst_string_crosses_midnight():
    # 2024-01-19 15:30:00 UTC is already the 20th in Seoul.
    assert to_kst_string(1705678200000) == "2024-01-20 00:30:00.000"


def test_to_kst_string_returns_none_for_missing_time():
    assert to_kst_string(0) is None
    assert to_kst_string(None) is None


def test_now_kst_string_is_fixed_width():
    assert now_kst_string(now_ms=1705651200000) == "2024-01-19 17:00:00"
    assert len(now_kst_string()) == len("2024-01-19 17:00:00")


@pytest.mark.parametrize("epoch_ms", [1705651195000000, 1e20, -1e20])
def test_to_kst_string_returns_none_for_out_of_range_time(epoch_ms):
    assert to_kst_string(epoch_ms) is None
    assert to_kst_string(epoch_ms, with_ms=False) is None
