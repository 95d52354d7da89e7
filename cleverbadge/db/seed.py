# cleverbadge/db/seed.py

"""
Demo / end-to-end data.

"math-geo" weights its three questions 1, 2, 2 (total 5): answering only the
first correctly scores 20%, answering all correctly scores 100%.
"""

import logging
import uuid

from sqlalchemy.orm import Session

from cleverbadge.engine.scorer import options_from_list
from cleverbadge.models.question import Question
from cleverbadge.models.test import Test, TestQuestion

logger = logging.getLogger(__name__)

Q_MATH = uuid.UUID("550e8400-e29b-41d4-a716-446655440010")
Q_FRANCE = uuid.UUID("550e8400-e29b-41d4-a716-446655440011")
Q_EVEN = uuid.UUID("550e8400-e29b-41d4-a716-446655440012")
Q_COLORS = uuid.UUID("550e8400-e29b-41d4-a716-446655440013")
Q_SKY = uuid.UUID("550e8400-e29b-41d4-a716-446655440014")

MATH_GEO_TEST_ID = uuid.UUID("550e8400-e29b-41d4-a716-446655440020")
DISABLED_TEST_ID = uuid.UUID("550e8400-e29b-41d4-a716-446655440021")
EMPTY_TEST_ID = uuid.UUID("550e8400-e29b-41d4-a716-446655440022")


def _options(texts, correct, explanations=None):
    explanations = explanations or {}
    return options_from_list([
        dict(
            {"text": text, "is_correct": index in correct},
            **({"explanation": explanations[index]} if index in explanations else {}),
        )
        for index, text in enumerate(texts)
    ])


QUESTIONS = [
    {
        "id": Q_MATH,
        "text": "What is 2 + 2?",
        "type": "SINGLE",
        "options": _options(["3", "4", "5", "6"], {1}, {1: "2 + 2 = 4"}),
        "tags": ["math", "easy"],
    },
    {
        "id": Q_FRANCE,
        "text": "What is the capital of France?",
        "type": "SINGLE",
        "options": _options(
            ["London", "Paris", "Berlin", "Madrid"],
            {1},
            {0: "London is the capital of the United Kingdom", 1: "Paris is the capital of France"},
        ),
        "tags": ["geography"],
    },
    {
        "id": Q_EVEN,
        "text": "Select all even numbers:",
        "type": "MULTIPLE",
        "options": _options(["1", "2", "3", "4"], {1, 3}),
        "tags": ["math"],
    },
    {
        "id": Q_COLORS,
        "text": "Select all primary colors:",
        "type": "MULTIPLE",
        "options": _options(["Red", "Green", "Blue", "Yellow"], {0, 2, 3}),
        "tags": ["art"],
    },
    {
        "id": Q_SKY,
        "text": "Is the sky blue?",
        "type": "SINGLE",
        "options": _options(["Yes", "No"], {0}),
        "tags": None,
    },
]


def seed(db: Session) -> None:
    """Insert the demo questions and tests; existing rows are left alone."""
    for data in QUESTIONS:
        if db.get(Question, data["id"]) is None:
            db.add(Question(**data))
    db.flush()

    if db.get(Test, MATH_GEO_TEST_ID) is None:
        test = Test(
            id=MATH_GEO_TEST_ID,
            title="Math & Geography Test",
            slug="math-geo",
            description="Test your math and geography knowledge",
            is_enabled=True,
            visibility="public",
            pass_threshold=70,
        )
        for position, (question_id, weight) in enumerate([(Q_MATH, 1), (Q_FRANCE, 2), (Q_EVEN, 2)]):
            test.questions.append(TestQuestion(question_id=question_id, weight=weight, position=position))
        db.add(test)

    if db.get(Test, DISABLED_TEST_ID) is None:
        test = Test(
            id=DISABLED_TEST_ID,
            title="Disabled Test",
            slug="disabled-test",
            description="This test is disabled",
            is_enabled=False,
        )
        test.questions.append(TestQuestion(question_id=Q_SKY, weight=1, position=0))
        db.add(test)

    if db.get(Test, EMPTY_TEST_ID) is None:
        db.add(Test(
            id=EMPTY_TEST_ID,
            title="Empty Test",
            slug="empty-test",
            description="A test with no questions",
            is_enabled=True,
            visibility="public",
        ))

    db.commit()
    logger.info("Seed data loaded")


if __name__ == "__main__":
    from cleverbadge.db.init_db import create_tables
    from cleverbadge.db.session import SessionLocal, engine

    logging.basicConfig(level=logging.INFO)
    create_tables(engine)
    session = SessionLocal()
    try:
        seed(session)
    finally:
        session.close()
