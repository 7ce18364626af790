import json

from crypto_signals.sessions.repository import (
    InMemorySubscriptionRepository,
    JsonSubscriptionRepository,
    Subscription,
)


def test_in_memory_repository():
    repo = InMemorySubscriptionRepository()
    assert repo.get(1) is None
    repo.put(Subscription(chat_id=1, name="alpha"))
    repo.put(Subscription(chat_id=2, name="beta", subscribed=False))
    assert repo.get(1).name == "alpha"
    assert len(repo.list()) == 2
    assert [sub.chat_id for sub in repo.subscribers()] == [1]


def test_json_repository_persists(tmp_path):
    path = tmp_path / "data.json"
    repo = JsonSubscriptionRepository(path)
    assert repo.list() == []
    repo.put(Subscription(chat_id=-100, name="group", created_at="2024-01-01T00:00:00"))

    payload = json.loads(path.read_text())
    assert payload["-100"] == {
        "id": -100,
        "name": "group",
        "subscribed": True,
        "createdAt": "2024-01-01T00:00:00",
    }
    reloaded = JsonSubscriptionRepository(path)
    assert reloaded.get(-100).name == "group"


def test_json_repository_get_returns_copy(tmp_path):
    repo = JsonSubscriptionRepository(tmp_path / "data.json")
    repo.put(Subscription(chat_id=5))
    fetched = repo.get(5)
    fetched.subscribed = False
    assert repo.get(5).subscribed is True
    repo.put(fetched)
    assert repo.subscribers() == []


def test_in_memory_repository_returns_copies():
    repo = InMemorySubscriptionRepository()
    repo.put(Subscription(chat_id=7))
    fetched = repo.get(7)
    fetched.subscribed = False
    assert repo.get(7).subscribed is True
    repo.list()[0].subscribed = False
    assert repo.subscribers()[0].chat_id == 7


def test_corrupt_session_file_starts_fresh(tmp_path):
    path = tmp_path / "data.json"
    path.write_text("{not json")
    repo = JsonSubscriptionRepository(path)
    assert repo.list() == []
    repo.put(Subscription(chat_id=9))
    assert JsonSubscriptionRepository(path).get(9) is not None


def test_failed_save_keeps_in_memory_state(tmp_path):
    path = tmp_path / "sessions"
    path.mkdir()
    repo = JsonSubscriptionRepository(path / "data.json")
    (path / "data.json").mkdir()
    repo.put(Subscription(chat_id=11, name="group"))
    assert repo.get(11).name == "group"
