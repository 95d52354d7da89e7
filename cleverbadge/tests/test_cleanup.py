from datetime import timedelta

from cleverbadge.db.seed import MATH_GEO_TEST_ID
from cleverbadge.engine.session_guard import utcnow
from cleverbadge.jobs.assessment_cleanup import run_cleanup
from cleverbadge.models.assessment import Assessment
from cleverbadge.schemas.assessment import StartAssessmentRequest
from cleverbadge.services.assessment import AssessmentService


def start_at(db, started_at, name="Candidate"):
    payload = StartAssessmentRequest(test_id=MATH_GEO_TEST_ID, candidate_name=name)
    return AssessmentService.start_assessment(db, payload, now=started_at)["assessment_id"]


def status_of(db, assessment_id):
    db.expire_all()
    return db.get(Assessment, assessment_id).status


def test_marks_only_stale_started_assessments(db):
    now = utcnow()
    stale = start_at(db, now - timedelta(hours=3), "Stale")
    fresh = start_at(db, now - timedelta(minutes=30), "Fresh")
    done = start_at(db, now - timedelta(hours=1), "Done")
    AssessmentService.submit_assessment(db, done, now=now - timedelta(minutes=50))

    # pretend the completed one is old too
    db.get(Assessment, done).started_at = now - timedelta(hours=5)
    db.commit()

    assert AssessmentService.mark_expired_assessments(db, now=now) == 1
    assert status_of(db, stale) == "ABANDONED"
    assert status_of(db, fresh) == "STARTED"
    assert status_of(db, done) == "COMPLETED"


def test_sweep_is_idempotent(db):
    now = utcnow()
    start_at(db, now - timedelta(hours=3))
    assert AssessmentService.mark_expired_assessments(db, now=now) == 1
    assert AssessmentService.mark_expired_assessments(db, now=now) == 0


def test_run_cleanup_uses_its_own_session(db, session_factory):
    start_at(db, utcnow() - timedelta(hours=4))
    assert run_cleanup(session_factory) == 1
