# cleverbadge/client/resume.py

"""
Session Resumption Guard.

A cached session is only a hint: the TTL check says whether it is worth
asking the server, and the server's answer decides whether it resumes.
Any rejection from the server ends the cached session. Only a failure to
get an answer at all (network, 5xx) leaves the cache in place, so answers
entered so far are not lost.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from cleverbadge.client.api import ApiError, CleverBadgeClient
from cleverbadge.client.session_store import CachedSession, SessionStore

logger = logging.getLogger(__name__)

REASON_EXPIRED = "expired"
REASON_ABANDONED = "abandoned"

# Server error codes with a reason of their own; any other 4xx counts as expired
RESTART_REASONS = {
    "ASSESSMENT_EXPIRED": REASON_EXPIRED,
    # submitted elsewhere: nothing left to resume
    "ASSESSMENT_COMPLETED": REASON_EXPIRED,
    "ASSESSMENT_NOT_FOUND": REASON_EXPIRED,
    "ASSESSMENT_ABANDONED": REASON_ABANDONED,
}


def restart_reason(exc: ApiError) -> Optional[str]:
    """Why a rejected request ends the cached session, or None to keep it."""
    reason = RESTART_REASONS.get(exc.code)
    if reason is None and exc.is_client_error:
        reason = REASON_EXPIRED
    return reason


@dataclass
class ResumeOutcome:
    """
    ``session`` is set when the candidate can continue. Otherwise the
    candidate starts fresh, and ``reason`` says why a cached session was
    dropped (None when there was nothing cached).
    """
    session: Optional[CachedSession] = None
    reason: Optional[str] = None

    @property
    def resumed(self) -> bool:
        return self.session is not None


@dataclass
class SubmitOutcome:
    """``result`` is the submit response, or ``reason`` says why it was refused."""
    result: Optional[Dict[str, Any]] = None
    reason: Optional[str] = None

    @property
    def submitted(self) -> bool:
        return self.result is not None


class SessionResumptionGuard:

    def __init__(self, store: SessionStore, client: Optional[CleverBadgeClient] = None):
        self.store = store
        self.client = client

    def is_resumable(self, session: CachedSession, now: Optional[datetime] = None) -> bool:
        """Client-side check only; the server must still confirm."""
        return not self.store.is_expired(session, now)

    def _load(self, test_slug: str) -> Tuple[Optional[CachedSession], bool]:
        session = self.store.get(test_slug)
        if session is None:
            return None, False
        if not self.is_resumable(session):
            self.store.clear(test_slug)
            logger.info(f"Cached session for {test_slug} expired, cleared")
            return None, True
        return session, False

    def _api(self) -> CleverBadgeClient:
        if self.client is None:
            raise RuntimeError("Server confirmation needs an API client")
        return self.client

    def _drop(self, test_slug: str, exc: ApiError) -> Optional[str]:
        reason = restart_reason(exc)
        if reason is not None:
            self.store.clear(test_slug)
            logger.info(f"Cached session for {test_slug} dropped by server: {exc.status_code} {exc.code}")
        return reason

    def load_if_fresh(self, test_slug: str) -> Optional[CachedSession]:
        """Cached session within its TTL; an expired one is purged."""
        session, _ = self._load(test_slug)
        return session

    def save(self, test_slug: str, session: CachedSession) -> CachedSession:
        return self.store.set(test_slug, session)

    def resume(self, test_slug: str) -> ResumeOutcome:
        """
        Load a fresh cached session and confirm it with the server.

        Answers recorded by the server replace cached ones. A server
        rejection purges the cache and reports the reason; transport
        errors and 5xx responses propagate with the cache untouched.
        """
        session, expired_locally = self._load(test_slug)
        if session is None:
            return ResumeOutcome(reason=REASON_EXPIRED if expired_locally else None)

        client = self._api()
        try:
            client.status(session.assessment_id)
            server_answers = client.answers(session.assessment_id)["answers"]
        except ApiError as exc:
            reason = self._drop(test_slug, exc)
            if reason is None:
                raise
            return ResumeOutcome(reason=reason)

        for answer in server_answers:
            session.answers[str(answer["question_id"])] = [str(o) for o in answer["selected_options"]]
        self.store.set(test_slug, session)

        return ResumeOutcome(session=session)

    def submit(self, test_slug: str) -> SubmitOutcome:
        """
        Submit the cached assessment and forget it.

        A refused submit (already completed, expired, abandoned) is
        reported like an expired session. Raises LookupError when nothing
        is cached for the test.
        """
        session = self.store.get(test_slug)
        if session is None:
            raise LookupError(f"No cached session for {test_slug}")

        try:
            result = self._api().submit(session.assessment_id)
        except ApiError as exc:
            reason = self._drop(test_slug, exc)
            if reason is None:
                raise
            return SubmitOutcome(reason=reason)

        self.store.clear(test_slug)
        logger.info(f"Assessment {session.assessment_id} submitted, cached session cleared")
        return SubmitOutcome(result=result)
