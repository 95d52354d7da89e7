import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL_LOCAL", "sqlite://")
os.environ.setdefault("CLEANUP_ENABLED", "false")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cleverbadge.db.init_db import create_tables
from cleverbadge.db.seed import seed
from cleverbadge.db.session import get_db
from cleverbadge.main import app
from cleverbadge.models.test import Test


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    seed(session)
    yield session
    session.close()


@pytest.fixture
def client(db, session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def set_policy(db):
    """Change a seeded test's disclosure settings."""
    def _set(slug, show_explanations, explanation_scope="selected_only", **fields):
        test = db.query(Test).filter(Test.slug == slug).one()
        test.show_explanations = show_explanations
        test.explanation_scope = explanation_scope
        for name, value in fields.items():
            setattr(test, name, value)
        db.commit()
        return test
    return _set
