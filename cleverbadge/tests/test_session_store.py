import os
from datetime import datetime, timedelta, timezone

import pytest

from cleverbadge.client.session_store import (
    CachedSession,
    FileSessionStore,
    InMemorySessionStore,
    storage_key,
)

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture(params=["memory", "file"])
def store_and_clock(request, tmp_path):
    clock = Clock(NOW)
    if request.param == "memory":
        return InMemorySessionStore(clock=clock), clock
    return FileSessionStore(str(tmp_path / "sessions"), clock=clock), clock


def make_session():
    return CachedSession(
        assessment_id="a1",
        candidate_name="Ada Lovelace",
        current_question_index=1,
        answers={"q1": ["1"]},
        questions=[{"id": "q1", "text": "What is 2 + 2?"}],
    )


def test_storage_key():
    assert storage_key("math-geo") == "cleverbadge_assessment_math-geo"


def test_set_stamps_saved_at_and_round_trips(store_and_clock):
    store, _ = store_and_clock
    store.set("math-geo", make_session())

    loaded = store.get("math-geo")
    assert loaded.assessment_id == "a1"
    assert loaded.answers == {"q1": ["1"]}
    assert loaded.current_question_index == 1
    assert loaded.saved_at == NOW


def test_get_missing_returns_none(store_and_clock):
    store, _ = store_and_clock
    assert store.get("unknown") is None


def test_clear(store_and_clock):
    store, _ = store_and_clock
    store.set("math-geo", make_session())
    store.clear("math-geo")
    assert store.get("math-geo") is None
    # clearing twice is harmless
    store.clear("math-geo")


def test_is_expired_follows_clock(store_and_clock):
    store, clock = store_and_clock
    session = store.set("math-geo", make_session())

    clock.now = NOW + timedelta(hours=1, minutes=59)
    assert store.is_expired(session) is False

    clock.now = NOW + timedelta(hours=2, seconds=1)
    assert store.is_expired(session) is True


def test_session_without_saved_at_is_expired():
    assert InMemorySessionStore().is_expired(make_session()) is True


def test_corrupted_file_is_ignored(tmp_path):
    store = FileSessionStore(str(tmp_path))
    with open(os.path.join(str(tmp_path), storage_key("math-geo") + ".json"), "w") as f:
        f.write("{not json")
    assert store.get("math-geo") is None


@pytest.mark.parametrize("slug", ["../escape", "a/b", "..", "Math-Geo", "", "math-geo\n"])
def test_storage_key_rejects_unsafe_slugs(slug):
    with pytest.raises(ValueError):
        storage_key(slug)


def test_file_store_stays_inside_its_directory(tmp_path):
    directory = tmp_path / "sessions"
    store = FileSessionStore(str(directory))

    with pytest.raises(ValueError):
        store.set("../outside", make_session())
    with pytest.raises(ValueError):
        store.get("../../etc/passwd")

    assert os.listdir(str(tmp_path)) == ["sessions"]
    assert os.listdir(str(directory)) == []
