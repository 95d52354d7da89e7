# cleverbadge/engine/session_guard.py

"""
Absolute time-to-live rule for assessment sessions.

A session saved (or started) at ``t`` is still alive at ``now`` while
``now - t <= ttl``; strictly more than ``ttl`` means expired. The same rule
backs the client-side session cache and the server-side assessment
lifetime.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union

DEFAULT_SESSION_TTL = timedelta(hours=2)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Union[datetime, str]) -> datetime:
    """Parse ISO strings and treat naive datetimes as UTC."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def expires_at(saved_at: Union[datetime, str], ttl: timedelta = DEFAULT_SESSION_TTL) -> datetime:
    return as_utc(saved_at) + ttl


def is_expired(
    saved_at: Union[datetime, str],
    now: Optional[datetime] = None,
    ttl: timedelta = DEFAULT_SESSION_TTL,
) -> bool:
    now = as_utc(now) if now is not None else utcnow()
    return now - as_utc(saved_at) > ttl
