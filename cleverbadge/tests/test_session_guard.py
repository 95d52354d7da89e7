from datetime import datetime, timedelta, timezone

from cleverbadge.engine.session_guard import as_utc, expires_at, is_expired

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def test_two_hours_and_one_second_is_expired():
    assert is_expired(NOW - timedelta(hours=2, seconds=1), NOW) is True


def test_one_hour_fifty_nine_minutes_is_fresh():
    assert is_expired(NOW - timedelta(hours=1, minutes=59), NOW) is False


def test_exactly_two_hours_is_fresh():
    assert is_expired(NOW - timedelta(hours=2), NOW) is False


def test_custom_ttl():
    assert is_expired(NOW - timedelta(minutes=11), NOW, ttl=timedelta(minutes=10)) is True


def test_naive_and_iso_values_are_utc():
    naive = datetime(2026, 3, 1, 10, 0, 0)
    assert as_utc(naive) == datetime(2026, 3, 1, 10, 0, 0, tzinfo=timezone.utc)
    assert as_utc("2026-03-01T10:00:00Z") == as_utc(naive)
    assert is_expired("2026-03-01T09:59:59+00:00", NOW) is True


def test_expires_at():
    assert expires_at(NOW) == NOW + timedelta(hours=2)
