# cleverbadge/engine/feedback.py

"""
Per-option feedback disclosure.

A test's disclosure policy is two independent settings:

- ``show_explanations`` decides in which context feedback is revealed
  (never, right after each answer, or after the whole test is submitted).
- ``explanation_scope`` decides which options of a revealed question are
  annotated (only the selected ones, or all of them).

Both are dispatched through lookup tables, so every policy x context pair
resolves without nested conditionals. Feedback is always a single list of
``OptionFeedback`` entries scoped server-side.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Set

from cleverbadge.engine.scorer import normalize_selection, options_of


class ShowExplanations(str, Enum):
    NEVER = "never"
    AFTER_EACH_QUESTION = "after_each_question"
    AFTER_SUBMIT = "after_submit"


class ExplanationScope(str, Enum):
    SELECTED_ONLY = "selected_only"
    ALL_ANSWERS = "all_answers"


class FeedbackContext(str, Enum):
    AFTER_ANSWER = "after_answer"
    AFTER_SUBMIT = "after_submit"


# Contexts in which each show_explanations setting reveals feedback
DISCLOSURE: Dict[ShowExplanations, FrozenSet[FeedbackContext]] = {
    ShowExplanations.NEVER: frozenset(),
    ShowExplanations.AFTER_EACH_QUESTION: frozenset({FeedbackContext.AFTER_ANSWER}),
    ShowExplanations.AFTER_SUBMIT: frozenset({FeedbackContext.AFTER_SUBMIT}),
}

# Which options of a revealed question are annotated
SCOPE_FILTERS: Dict[ExplanationScope, Callable[[str, Set[str]], bool]] = {
    ExplanationScope.SELECTED_ONLY: lambda option_id, selected: option_id in selected,
    ExplanationScope.ALL_ANSWERS: lambda option_id, selected: True,
}


@dataclass(frozen=True)
class FeedbackPolicy:
    show_explanations: ShowExplanations = ShowExplanations.NEVER
    explanation_scope: ExplanationScope = ExplanationScope.SELECTED_ONLY

    @classmethod
    def from_test(cls, test: Any) -> "FeedbackPolicy":
        """Build from a Test row or any object with the two settings."""
        return cls(
            show_explanations=ShowExplanations(test.show_explanations),
            explanation_scope=ExplanationScope(test.explanation_scope),
        )

    def discloses(self, context: FeedbackContext) -> bool:
        return context in DISCLOSURE[self.show_explanations]


@dataclass(frozen=True)
class OptionFeedback:
    id: str
    is_correct: bool
    explanation: Optional[str]
    was_selected: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def annotate_options(
    question: Any,
    selected_option_ids: Optional[Iterable[Any]],
    scope: ExplanationScope,
) -> List[OptionFeedback]:
    """
    Annotate the options of one question, keeping the question's option order.

    Selected IDs that are not options of the question are not reported.
    """
    selected = normalize_selection(selected_option_ids)
    include = SCOPE_FILTERS[scope]

    feedback: List[OptionFeedback] = []
    for option_id, option in options_of(question).items():
        option_id = str(option_id)
        if not include(option_id, selected):
            continue
        feedback.append(OptionFeedback(
            id=option_id,
            is_correct=bool(option.get("is_correct")),
            explanation=option.get("explanation") or None,
            was_selected=option_id in selected,
        ))
    return feedback


def project_feedback(
    question: Any,
    selected_option_ids: Optional[Iterable[Any]],
    policy: FeedbackPolicy,
    context: FeedbackContext,
) -> Optional[List[OptionFeedback]]:
    """
    Feedback visible to the candidate for one question in a given context.

    Returns:
        None when the policy reveals nothing in this context, otherwise
        the option annotations narrowed by the policy's scope
    """
    if not policy.discloses(context):
        return None
    return annotate_options(question, selected_option_ids, policy.explanation_scope)
