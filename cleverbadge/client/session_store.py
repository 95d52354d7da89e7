# cleverbadge/client/session_store.py

"""
Client-side cache of in-progress assessments, keyed by test slug.

The store is an injected interface rather than ambient global state, so a
runner can use the JSON-file backend while tests use the in-memory one.
"""

import json
import logging
import os
import re
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from cleverbadge.engine.session_guard import DEFAULT_SESSION_TTL, as_utc, is_expired, utcnow
from cleverbadge.schemas.test import SLUG_PATTERN

logger = logging.getLogger(__name__)

STORAGE_PREFIX = "cleverbadge_assessment_"


def storage_key(test_slug: str) -> str:
    """Raises ValueError unless the slug is a valid test slug."""
    if not isinstance(test_slug, str) or not re.fullmatch(SLUG_PATTERN, test_slug):
        raise ValueError(f"Invalid test slug: {test_slug!r}")
    return f"{STORAGE_PREFIX}{test_slug}"


@dataclass
class CachedSession:
    assessment_id: str
    candidate_name: str
    current_question_index: int = 0
    answers: Dict[str, List[str]] = field(default_factory=dict)
    questions: List[Dict[str, Any]] = field(default_factory=list)
    saved_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["saved_at"] = self.saved_at.isoformat() if self.saved_at else None
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CachedSession":
        return cls(
            assessment_id=str(data["assessment_id"]),
            candidate_name=data["candidate_name"],
            current_question_index=int(data.get("current_question_index", 0)),
            answers={str(k): [str(o) for o in v] for k, v in (data.get("answers") or {}).items()},
            questions=list(data.get("questions") or []),
            saved_at=as_utc(data["saved_at"]) if data.get("saved_at") else None,
        )


class SessionStore(ABC):
    """get / set / clear / is_expired over cached sessions."""

    def __init__(
        self,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.ttl = ttl
        self.clock = clock

    @abstractmethod
    def _read(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def _write(self, key: str, raw: str) -> None:
        ...

    @abstractmethod
    def _delete(self, key: str) -> None:
        ...

    def get(self, test_slug: str) -> Optional[CachedSession]:
        """Cached session as stored, expired or not; None if absent or unreadable."""
        raw = self._read(storage_key(test_slug))
        if raw is None:
            return None
        try:
            return CachedSession.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning(f"Discarding unreadable cached session for {test_slug}: {exc}")
            return None

    def set(self, test_slug: str, session: CachedSession) -> CachedSession:
        """Save the session, stamping saved_at with the current time."""
        session.saved_at = self.clock()
        self._write(storage_key(test_slug), json.dumps(session.to_dict()))
        return session

    def clear(self, test_slug: str) -> None:
        self._delete(storage_key(test_slug))

    def is_expired(self, session: CachedSession, now: Optional[datetime] = None) -> bool:
        if session.saved_at is None:
            return True
        return is_expired(session.saved_at, now or self.clock(), self.ttl)


class InMemorySessionStore(SessionStore):

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._data: Dict[str, str] = {}

    def _read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def _write(self, key: str, raw: str) -> None:
        self._data[key] = raw

    def _delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileSessionStore(SessionStore):
    """One JSON file per test slug under ``directory``."""

    def __init__(self, directory: str, **kwargs):
        super().__init__(**kwargs)
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def _read(self, key: str) -> Optional[str]:
        try:
            with open(self._path(key), "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def _write(self, key: str, raw: str) -> None:
        with open(self._path(key), "w", encoding="utf-8") as f:
            f.write(raw)

    def _delete(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass
