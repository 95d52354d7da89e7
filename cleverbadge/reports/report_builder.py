from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List

from cleverbadge.engine.scorer import (
    PassStatus,
    ScoreResult,
    pass_status,
    round_percentage,
)

STATUS_LABELS = {
    PassStatus.NEUTRAL: "Completed",
    PassStatus.PASSED: "Passed",
    PassStatus.NOT_PASSED: "Not Passed",
}

UNTAGGED = "general"


def _tag_summary(snapshot: List[Dict[str, Any]], result: ScoreResult) -> Dict[str, Dict[str, Any]]:
    """Earned/total weight per question tag."""
    outcome = {q.question_id: q for q in result.questions}
    summary: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"earned_weight": 0, "total_weight": 0})

    for question in snapshot:
        for tag in question.get("tags") or [UNTAGGED]:
            summary[tag]["total_weight"] += question["weight"]
            if outcome[question["id"]].is_correct:
                summary[tag]["earned_weight"] += question["weight"]

    for tag_scores in summary.values():
        total = tag_scores["total_weight"]
        tag_scores["percentage"] = (
            round_percentage(tag_scores["earned_weight"] / total * 100) if total else 0.0
        )
    return dict(summary)


def generate_assessment_report(
    assessment: Any,
    test: Any,
    result: ScoreResult,
) -> Dict[str, Any]:
    """
    Build the result report of a completed assessment.

    Args:
        assessment: Assessment row (snapshot, candidate, timestamps)
        test: Test row the assessment belongs to
        result: Score breakdown recomputed from the snapshot

    Returns:
        JSON-ready report dictionary
    """
    snapshot = assessment.questions_snapshot
    percentage = result.percentage
    status = pass_status(percentage, test.pass_threshold)
    label = STATUS_LABELS[status]

    # -------------------------
    # SUMMARY
    # -------------------------
    summary = [
        f"{assessment.candidate_name} completed \"{test.title}\" with a score of "
        f"{result.display_percentage}%.",
        f"{result.correct_count} of {len(result.questions)} questions were answered correctly, "
        f"earning {result.earned_weight} of {result.total_weight} weighted points.",
    ]
    if status is PassStatus.NEUTRAL:
        summary.append("This test has no pass threshold.")
    else:
        summary.append(f"The pass threshold is {test.pass_threshold}%: {label}.")

    unanswered = sum(1 for q in result.questions if not q.answered)
    if unanswered:
        summary.append(f"{unanswered} question(s) were left unanswered and scored as incorrect.")

    # -------------------------
    # STRENGTHS / WEAKNESSES
    # -------------------------
    tag_summary = _tag_summary(snapshot, result)
    strengths = [
        f"Strong results on {tag} ({scores['percentage']}%)."
        for tag, scores in tag_summary.items()
        if scores["percentage"] >= 70
    ]
    weaknesses = [
        f"Weak results on {tag} ({scores['percentage']}%)."
        for tag, scores in tag_summary.items()
        if scores["percentage"] <= 40
    ]

    # -------------------------
    # PER QUESTION
    # -------------------------
    outcome = {q.question_id: q for q in result.questions}
    question_breakdown = [
        {
            "question_number": question["question_number"],
            "question_id": question["id"],
            "text": question["text"],
            "weight": question["weight"],
            "answered": outcome[question["id"]].answered,
            "is_correct": outcome[question["id"]].is_correct,
            "selected_options": outcome[question["id"]].selected_options,
        }
        for question in snapshot
    ]

    completed_at = assessment.completed_at
    return {
        "assessment_id": str(assessment.id),
        "candidate": {"name": assessment.candidate_name},
        "test": {"id": str(test.id), "title": test.title, "slug": test.slug},
        "scores": {
            "earned_weight": result.earned_weight,
            "total_weight": result.total_weight,
            "percentage": percentage,
            "display_percentage": result.display_percentage,
            "pass_threshold": test.pass_threshold,
            "status": status.value,
            "label": label,
        },
        "summary": summary,
        "strengths": strengths,
        "weaknesses": weaknesses,
        "tag_summary": tag_summary,
        "question_breakdown": question_breakdown,
        "completed_at": completed_at.isoformat() if completed_at else None,
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }
