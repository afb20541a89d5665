"""Unit tests for clock utility."""

from datetime import UTC, datetime, timedelta, timezone

from app.utils.clock import parse_iso, to_iso, utc_now, utc_now_iso


def test_utc_now():
    result = utc_now()
    assert isinstance(result, datetime)
    assert result.tzinfo is not None


def test_to_iso_uses_milliseconds_and_z_suffix():
    value = datetime(2025, 3, 4, 5, 6, 7, 891234, tzinfo=UTC)
    assert to_iso(value) == "2025-03-04T05:06:07.891Z"


def test_to_iso_converts_offsets_to_utc():
    value = datetime(2025, 3, 4, 10, 0, 0, tzinfo=timezone(timedelta(hours=5)))
    assert to_iso(value) == "2025-03-04T05:00:00.000Z"


def test_utc_now_iso_round_trips():
    stamp = utc_now_iso()
    assert stamp.endswith("Z")
    parsed = parse_iso(stamp)
    assert parsed is not None
    assert abs((parsed - datetime.now(UTC)).total_seconds()) < 5


def test_parse_iso_rejects_missing_or_malformed():
    assert parse_iso(None) is None
    assert parse_iso("") is None
    assert parse_iso("yesterday") is None
    assert parse_iso(12345) is None


def test_parse_iso_assumes_utc_for_naive_values():
    parsed = parse_iso("2025-01-01T00:00:00")
    assert parsed == datetime(2025, 1, 1, tzinfo=UTC)
