import uuid
from datetime import timedelta

import httpx
import pytest

from cleverbadge.client.api import ApiError, CleverBadgeClient
from cleverbadge.client.resume import SessionResumptionGuard
from cleverbadge.client.session_store import CachedSession, InMemorySessionStore
from cleverbadge.db.seed import MATH_GEO_TEST_ID, Q_FRANCE, Q_MATH
from cleverbadge.engine.session_guard import utcnow
from cleverbadge.models.assessment import Assessment

SLUG = "math-geo"


class Clock:
    def __init__(self):
        self.now = utcnow()

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def api(client):
    return CleverBadgeClient(client)


@pytest.fixture
def guard(api, clock):
    return SessionResumptionGuard(InMemorySessionStore(clock=clock), api)


def begin(api, guard):
    started = api.start(MATH_GEO_TEST_ID, "Ada Lovelace")
    session = CachedSession(
        assessment_id=started["assessment_id"],
        candidate_name="Ada Lovelace",
        questions=started["questions"],
    )
    guard.save(SLUG, session)
    return session


def test_nothing_cached(guard):
    outcome = guard.resume(SLUG)
    assert outcome.resumed is False
    assert outcome.reason is None


def test_resume_restores_server_answers(api, guard):
    session = begin(api, guard)
    api.answer(session.assessment_id, Q_MATH, ["1"])
    api.answer(session.assessment_id, Q_FRANCE, ["0"])

    outcome = guard.resume(SLUG)
    assert outcome.resumed is True
    assert outcome.session.answers == {str(Q_MATH): ["1"], str(Q_FRANCE): ["0"]}
    assert guard.load_if_fresh(SLUG).answers == outcome.session.answers


def test_locally_expired_cache_is_purged(api, guard, clock):
    begin(api, guard)
    clock.now += timedelta(hours=2, seconds=1)

    assert guard.load_if_fresh(SLUG) is None
    assert guard.store.get(SLUG) is None


def test_locally_expired_resume_reports_expired(api, guard, clock):
    begin(api, guard)
    clock.now += timedelta(hours=3)

    outcome = guard.resume(SLUG)
    assert outcome.resumed is False
    assert outcome.reason == "expired"


def test_fresh_cache_is_resumable_client_side(api, guard, clock):
    session = begin(api, guard)
    clock.now += timedelta(hours=1, minutes=59)
    assert guard.is_resumable(session) is True
    assert guard.load_if_fresh(SLUG) is not None


def test_server_abandoned_assessment(api, guard, db):
    session = begin(api, guard)
    db.get(Assessment, uuid.UUID(session.assessment_id)).status = "ABANDONED"
    db.commit()

    outcome = guard.resume(SLUG)
    assert outcome.reason == "abandoned"
    assert guard.store.get(SLUG) is None


def test_server_expired_assessment(api, guard, db):
    session = begin(api, guard)
    assessment = db.get(Assessment, uuid.UUID(session.assessment_id))
    assessment.started_at = utcnow() - timedelta(hours=3)
    db.commit()

    # the cache is fresh, the server says otherwise
    outcome = guard.resume(SLUG)
    assert outcome.reason == "expired"
    assert guard.store.get(SLUG) is None


def test_submitted_elsewhere_counts_as_expired(api, guard):
    session = begin(api, guard)
    api.submit(session.assessment_id)

    outcome = guard.resume(SLUG)
    assert outcome.reason == "expired"


def test_any_rejection_purges_the_cache(guard):
    # a corrupted id is refused with 400 on every try: start fresh instead
    guard.save(SLUG, CachedSession(assessment_id="not-a-uuid", candidate_name="Ada"))

    outcome = guard.resume(SLUG)
    assert outcome.resumed is False
    assert outcome.reason == "expired"
    assert guard.store.get(SLUG) is None


def test_client_surfaces_error_codes(api):
    with pytest.raises(ApiError) as exc:
        api.get_test("disabled-test")
    assert exc.value.status_code == 403
    assert exc.value.code == "TEST_DISABLED"


def test_full_candidate_flow(api):
    test = api.get_test(SLUG)
    started = api.start(test["id"], "Grace Hopper")
    assessment_id = started["assessment_id"]

    for question in started["questions"]:
        api.answer(assessment_id, question["id"], [question["options"][1]["id"]])

    submitted = api.submit(assessment_id)
    # Q1 and Q2 correct, Q3 partial: 3 of 5
    assert submitted["score_percentage"] == 60.0
    assert api.results(assessment_id)["display_percentage"] == 60


def offline_guard(clock, handler):
    http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://testserver")
    return SessionResumptionGuard(InMemorySessionStore(clock=clock), CleverBadgeClient(http))


def cache_one(guard):
    guard.save(SLUG, CachedSession(
        assessment_id="550e8400-e29b-41d4-a716-446655440099",
        candidate_name="Ada",
        answers={str(Q_MATH): ["1"]},
    ))


def test_server_error_keeps_the_cache(clock):
    guard = offline_guard(clock, lambda request: httpx.Response(503, json={"detail": "Unavailable"}))
    cache_one(guard)

    with pytest.raises(ApiError) as exc:
        guard.resume(SLUG)
    assert exc.value.status_code == 503
    assert guard.store.get(SLUG).answers == {str(Q_MATH): ["1"]}


def test_network_failure_keeps_the_cache(clock):
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    guard = offline_guard(clock, unreachable)
    cache_one(guard)

    with pytest.raises(httpx.TransportError):
        guard.resume(SLUG)
    with pytest.raises(httpx.TransportError):
        guard.submit(SLUG)
    assert guard.store.get(SLUG) is not None


# ---------------------------------------------------------------
# Submit through the guard
# ---------------------------------------------------------------

def test_submit_clears_the_cache(api, guard):
    session = begin(api, guard)
    api.answer(session.assessment_id, Q_MATH, ["1"])

    outcome = guard.submit(SLUG)
    assert outcome.submitted is True
    assert outcome.result["score_percentage"] == 20.0
    assert guard.store.get(SLUG) is None


def test_submit_of_completed_assessment_counts_as_expired(api, guard):
    session = begin(api, guard)
    api.submit(session.assessment_id)

    outcome = guard.submit(SLUG)
    assert outcome.submitted is False
    assert outcome.reason == "expired"
    assert guard.store.get(SLUG) is None


def test_submit_of_expired_assessment(api, guard, db):
    session = begin(api, guard)
    db.get(Assessment, uuid.UUID(session.assessment_id)).started_at = utcnow() - timedelta(hours=3)
    db.commit()

    outcome = guard.submit(SLUG)
    assert outcome.reason == "expired"
    assert guard.store.get(SLUG) is None


def test_submit_of_abandoned_assessment(api, guard, db):
    session = begin(api, guard)
    db.get(Assessment, uuid.UUID(session.assessment_id)).status = "ABANDONED"
    db.commit()

    outcome = guard.submit(SLUG)
    assert outcome.reason == "abandoned"
    assert guard.store.get(SLUG) is None


def test_submit_server_error_keeps_answers(clock):
    guard = offline_guard(clock, lambda request: httpx.Response(500, json={"detail": "boom"}))
    cache_one(guard)

    with pytest.raises(ApiError):
        guard.submit(SLUG)
    assert guard.store.get(SLUG).answers == {str(Q_MATH): ["1"]}


def test_submit_without_cached_session(guard):
    with pytest.raises(LookupError):
        guard.submit(SLUG)
