from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

from vendorsync.ingestion.normalize import parse_timestamp, safe_bool, safe_float, safe_int, safe_str, to_epoch_ms


def test_parse_timestamp_iso_with_z_suffix() -> None:
    assert parse_timestamp("2026-03-10T11:59:00Z") == datetime(2026, 3, 10, 11, 59, tzinfo=UTC)


def test_parse_timestamp_naive_is_utc() -> None:
    assert parse_timestamp("2026-03-10T11:59:00") == datetime(2026, 3, 10, 11, 59, tzinfo=UTC)


def test_parse_timestamp_keeps_offset() -> None:
    parsed = parse_timestamp("2026-03-10T17:29:00+05:30")

    assert parsed is not None
    assert parsed.utcoffset() == timedelta(hours=5, minutes=30)
    assert parsed == datetime(2026, 3, 10, 11, 59, tzinfo=UTC)


def test_parse_timestamp_epoch_seconds_and_milliseconds() -> None:
    expected = datetime.fromtimestamp(1_770_928_447, tz=UTC)

    assert parse_timestamp(1_770_928_447) == expected
    assert parse_timestamp(1_770_928_447_000) == expected
    assert parse_timestamp("1770928447000") == expected


def test_parse_timestamp_rejects_garbage() -> None:
    assert parse_timestamp("next tuesday") is None
    assert parse_timestamp("") is None
    assert parse_timestamp(None) is None
    assert parse_timestamp(True) is None


def test_to_epoch_ms() -> None:
    moment = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)

    assert to_epoch_ms(moment) == 1_773_144_000_000
    assert to_epoch_ms(moment.replace(tzinfo=None)) == 1_773_144_000_000
    assert to_epoch_ms(moment.astimezone(timezone(timedelta(hours=5, minutes=30)))) == 1_773_144_000_000


def test_safe_helpers() -> None:
    assert safe_float("4.5") == 4.5
    assert safe_float("nan") is None
    assert safe_float("n/a") is None
    assert safe_int("7.9") == 7
    assert safe_str(12) == "12"
    assert safe_str("") is None
    assert safe_bool("yes") is True
    assert safe_bool("maybe", default=True) is True
    assert safe_bool(None) is False
