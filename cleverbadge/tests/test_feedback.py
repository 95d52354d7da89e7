import pytest

from cleverbadge.engine.feedback import (
    ExplanationScope,
    FeedbackContext,
    FeedbackPolicy,
    ShowExplanations,
    annotate_options,
    project_feedback,
)

QUESTION = {
    "id": "q1",
    "type": "MULTIPLE",
    "options": {
        "0": {"text": "1", "is_correct": False, "explanation": "1 is odd"},
        "1": {"text": "2", "is_correct": True, "explanation": "2 is even"},
        "2": {"text": "3", "is_correct": False},
        "3": {"text": "4", "is_correct": True, "explanation": ""},
    },
}

SELECTED = ["0", "1"]


def policy(show, scope):
    return FeedbackPolicy(ShowExplanations(show), ExplanationScope(scope))


@pytest.mark.parametrize("scope", list(ExplanationScope))
@pytest.mark.parametrize("context", list(FeedbackContext))
def test_never_discloses_nothing(scope, context):
    assert project_feedback(QUESTION, SELECTED, policy("never", scope), context) is None


@pytest.mark.parametrize(
    "show, context, disclosed",
    [
        ("after_each_question", FeedbackContext.AFTER_ANSWER, True),
        ("after_each_question", FeedbackContext.AFTER_SUBMIT, False),
        ("after_submit", FeedbackContext.AFTER_ANSWER, False),
        ("after_submit", FeedbackContext.AFTER_SUBMIT, True),
    ],
)
@pytest.mark.parametrize("scope", ["selected_only", "all_answers"])
def test_disclosure_context(show, context, disclosed, scope):
    feedback = project_feedback(QUESTION, SELECTED, policy(show, scope), context)
    assert (feedback is not None) is disclosed


def test_selected_only_returns_selected_options():
    feedback = project_feedback(
        QUESTION, SELECTED, policy("after_submit", "selected_only"), FeedbackContext.AFTER_SUBMIT
    )
    assert [f.id for f in feedback] == ["0", "1"]
    assert [f.is_correct for f in feedback] == [False, True]
    assert all(f.was_selected for f in feedback)
    assert feedback[0].explanation == "1 is odd"


def test_all_answers_returns_every_option():
    feedback = project_feedback(
        QUESTION, SELECTED, policy("after_submit", "all_answers"), FeedbackContext.AFTER_SUBMIT
    )
    assert [f.id for f in feedback] == ["0", "1", "2", "3"]
    assert [f.was_selected for f in feedback] == [True, True, False, False]
    # the missed correct option is visible
    assert feedback[3].is_correct is True and feedback[3].was_selected is False


def test_missing_or_empty_explanation_is_none():
    feedback = annotate_options(QUESTION, [], ExplanationScope.ALL_ANSWERS)
    assert feedback[2].explanation is None
    assert feedback[3].explanation is None


def test_unknown_selected_ids_are_not_reported():
    feedback = annotate_options(QUESTION, ["1", "42"], ExplanationScope.SELECTED_ONLY)
    assert [f.id for f in feedback] == ["1"]


def test_to_dict_shape():
    entry = annotate_options(QUESTION, ["1"], ExplanationScope.SELECTED_ONLY)[0]
    assert entry.to_dict() == {
        "id": "1",
        "is_correct": True,
        "explanation": "2 is even",
        "was_selected": True,
    }


def test_policy_from_test_row():
    class Row:
        show_explanations = "after_each_question"
        explanation_scope = "all_answers"

    p = FeedbackPolicy.from_test(Row())
    assert p.show_explanations is ShowExplanations.AFTER_EACH_QUESTION
    assert p.explanation_scope is ExplanationScope.ALL_ANSWERS
    assert p.discloses(FeedbackContext.AFTER_ANSWER)
