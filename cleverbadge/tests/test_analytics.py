from cleverbadge.db.seed import MATH_GEO_TEST_ID, Q_EVEN, Q_FRANCE, Q_MATH


def take(client, answers, submit=True):
    assessment_id = client.post(
        "/api/assessments/start",
        json={"test_id": str(MATH_GEO_TEST_ID), "candidate_name": "Candidate"},
    ).json()["assessment_id"]
    for question_id, options in answers.items():
        client.post(
            f"/api/assessments/{assessment_id}/answer",
            json={"question_id": str(question_id), "selected_options": options},
        )
    if submit:
        client.post(f"/api/assessments/{assessment_id}/submit")
    return assessment_id


def test_question_success_rates(client):
    take(client, {Q_MATH: ["1"], Q_FRANCE: ["1"], Q_EVEN: ["1"]})
    take(client, {Q_MATH: ["1"], Q_FRANCE: ["0"], Q_EVEN: ["1", "3"]})
    take(client, {Q_MATH: ["0"], Q_FRANCE: ["0"]})
    # in-progress attempts are not counted
    take(client, {Q_EVEN: ["1", "3"]}, submit=False)

    response = client.get(f"/api/tests/{MATH_GEO_TEST_ID}/analytics/questions")
    assert response.status_code == 200
    body = response.json()

    assert body["total_assessments"] == 3
    stats = {s["question_id"]: s for s in body["question_stats"]}

    assert stats[str(Q_MATH)]["total_attempts"] == 3
    assert stats[str(Q_MATH)]["correct_attempts"] == 2
    assert stats[str(Q_MATH)]["success_rate"] == 66.7

    assert stats[str(Q_FRANCE)]["success_rate"] == 33.3
    assert stats[str(Q_EVEN)]["total_attempts"] == 2
    assert stats[str(Q_EVEN)]["success_rate"] == 50.0

    # hardest first
    rates = [s["success_rate"] for s in body["question_stats"]]
    assert rates == sorted(rates)


def test_analytics_without_attempts(client):
    body = client.get(f"/api/tests/{MATH_GEO_TEST_ID}/analytics/questions").json()
    assert body["total_assessments"] == 0
    assert all(s["success_rate"] == 0.0 for s in body["question_stats"])
    assert [s["weight"] for s in body["question_stats"]] == [1, 2, 2]


def test_analytics_unknown_test(client):
    response = client.get("/api/tests/00000000-0000-0000-0000-000000000000/analytics/questions")
    assert response.status_code == 404
