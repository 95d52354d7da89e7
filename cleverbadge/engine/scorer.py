# cleverbadge/engine/scorer.py

"""
RULE-BASED SCORING ENGINE.

Deterministic scoring for multiple-choice assessments:

1. A question is correct only when the selected option set is exactly the
   correct option set. No partial credit at the question level.
2. The assessment score is the weighted share of correct questions:
   earned_weight / total_weight * 100, kept to one decimal.
3. Unanswered questions earn nothing but stay in the denominator.
4. A test with no weight scores 0.
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Set, Tuple
import logging

logger = logging.getLogger(__name__)


MIN_OPTIONS = 2
MAX_OPTIONS = 10


class QuestionType(str, Enum):
    """Supported question types."""
    SINGLE = "SINGLE"
    MULTIPLE = "MULTIPLE"


class PassStatus(str, Enum):
    """Presentation label derived from a score and a test threshold."""
    NEUTRAL = "neutral"
    PASSED = "passed"
    NOT_PASSED = "not_passed"


class WeightedQuestion(NamedTuple):
    question: Any
    weight: int


@dataclass
class QuestionScore:
    """Scoring outcome for one question of a test."""
    question_id: str
    weight: int
    is_correct: bool
    answered: bool
    selected_options: List[str] = field(default_factory=list)


@dataclass
class ScoreResult:
    """Weighted aggregate over all questions of a test."""
    earned_weight: int = 0
    total_weight: int = 0
    percentage: float = 0.0
    questions: List[QuestionScore] = field(default_factory=list)

    @property
    def correct_count(self) -> int:
        return sum(1 for q in self.questions if q.is_correct)

    @property
    def display_percentage(self) -> int:
        """Whole percent from the exact ratio, not from the one-decimal score."""
        if self.total_weight <= 0:
            return 0
        exact = Decimal(self.earned_weight) * 100 / Decimal(self.total_weight)
        return int(exact.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# -------------------------------------------------------------------
# Accessors (snapshot dicts and ORM rows both carry id / options)
# -------------------------------------------------------------------

def _field(question: Any, name: str, default: Any = None) -> Any:
    if isinstance(question, Mapping):
        return question.get(name, default)
    return getattr(question, name, default)


def question_id_of(question: Any) -> str:
    return str(_field(question, "id"))


def options_of(question: Any) -> Dict[str, Dict[str, Any]]:
    return _field(question, "options") or {}


def normalize_selection(selected_option_ids: Optional[Iterable[Any]]) -> Set[str]:
    """Option IDs are compared as strings; 1 and "1" are the same option."""
    if not selected_option_ids:
        return set()
    return {str(option_id) for option_id in selected_option_ids}


def correct_option_ids(question: Any) -> Set[str]:
    return {
        str(option_id)
        for option_id, option in options_of(question).items()
        if option.get("is_correct")
    }


# -------------------------------------------------------------------
# Answer matcher
# -------------------------------------------------------------------

def is_question_correct(question: Any, selected_option_ids: Optional[Iterable[Any]]) -> bool:
    """
    Exact set match between the selection and the correct options.

    Selecting a subset or a superset of the correct options is incorrect.
    Unknown option IDs never match a correct option, so a selection that
    contains one is incorrect.

    Args:
        question: Question with an ``options`` mapping of option-id to
            ``{"text", "is_correct", "explanation"}``
        selected_option_ids: Option IDs chosen by the candidate

    Returns:
        True only when both sets are equal
    """
    return normalize_selection(selected_option_ids) == correct_option_ids(question)


# -------------------------------------------------------------------
# Weighted score aggregator
# -------------------------------------------------------------------

def round_percentage(value: float) -> float:
    """Round half-up to one decimal."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def score_breakdown(
    test_questions: Iterable[WeightedQuestion],
    answers: Mapping[str, Iterable[Any]],
) -> ScoreResult:
    """
    Score every question of a test and aggregate by weight.

    Args:
        test_questions: Ordered (question, weight) pairs of the test
        answers: question-id -> selected option IDs

    Returns:
        ScoreResult with per-question outcomes and the percentage
    """
    normalized_answers = {str(qid): selection for qid, selection in answers.items()}
    result = ScoreResult()

    for question, weight in test_questions:
        qid = question_id_of(question)
        selection = normalized_answers.get(qid)
        correct = is_question_correct(question, selection)

        result.total_weight += weight
        if correct:
            result.earned_weight += weight

        result.questions.append(QuestionScore(
            question_id=qid,
            weight=weight,
            is_correct=correct,
            answered=selection is not None,
            selected_options=sorted(normalize_selection(selection)),
        ))
        logger.debug(f"Scored {qid}: weight={weight} correct={correct}")

    if result.total_weight > 0:
        result.percentage = round_percentage(result.earned_weight / result.total_weight * 100)

    return result


def compute_score(
    test_questions: Iterable[WeightedQuestion],
    answers: Mapping[str, Iterable[Any]],
) -> float:
    """Weighted percentage in [0, 100] with one decimal; 0 for an empty test."""
    return score_breakdown(test_questions, answers).percentage


# -------------------------------------------------------------------
# Presentation helpers
# -------------------------------------------------------------------

def pass_status(percentage: float, pass_threshold: int) -> PassStatus:
    if not pass_threshold:
        return PassStatus.NEUTRAL
    if percentage >= pass_threshold:
        return PassStatus.PASSED
    return PassStatus.NOT_PASSED


# -------------------------------------------------------------------
# Option format validation
# -------------------------------------------------------------------

def validate_options(options: Mapping[str, Any], question_type: str) -> Tuple[bool, List[str]]:
    """
    Validate an options mapping against the question type rules.

    Returns:
        (is_valid, errors)
    """
    errors: List[str] = []

    if not isinstance(options, Mapping):
        return False, ["Options must be a mapping of option id to option"]

    if len(options) < MIN_OPTIONS or len(options) > MAX_OPTIONS:
        errors.append(f"Questions must have between {MIN_OPTIONS} and {MAX_OPTIONS} options")

    for option_id, option in options.items():
        if not isinstance(option, Mapping):
            errors.append(f"Option {option_id} must be an object")
            continue
        text = option.get("text")
        if not text or not isinstance(text, str):
            errors.append(f"Option {option_id} is missing text")
        if not isinstance(option.get("is_correct"), bool):
            errors.append(f"Option {option_id} is missing is_correct boolean")

    correct_count = sum(
        1 for option in options.values()
        if isinstance(option, Mapping) and option.get("is_correct") is True
    )

    if question_type == QuestionType.SINGLE.value and correct_count != 1:
        errors.append("SINGLE type questions must have exactly 1 correct answer")
    elif question_type == QuestionType.MULTIPLE.value and correct_count < 1:
        errors.append("MULTIPLE type questions must have at least 1 correct answer")
    elif question_type not in (QuestionType.SINGLE.value, QuestionType.MULTIPLE.value):
        errors.append(f"Unknown question type: {question_type}")

    return len(errors) == 0, errors


def options_from_list(options: List[Mapping[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Assign stable string IDs ("0", "1", ...) to a list of options."""
    return {str(index): dict(option) for index, option in enumerate(options)}
