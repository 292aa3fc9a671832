import pytest

from multitaskos.ids import user_document_path
from multitaskos.remote_store import DocumentStore, strip_empty


def test_strip_empty_drops_what_the_cloud_store_drops():
    state = {
        "jobQueue": [],
        "unsavedJob": None,
        "timestamp": 0,
        "nested": {"tag": "Queued", "data": {"title": "", "worklog": []}, "history": {"events": []}},
    }
    assert strip_empty(state) == {
        "timestamp": 0,
        "nested": {"tag": "Queued", "data": {"title": ""}},
    }
    assert strip_empty({"jobQueue": []}) is None


def test_write_then_read(tmp_path):
    store = DocumentStore(tmp_path / "remote.db")
    assert store.read("alice") is None

    store.write("alice", {"jobQueue": [], "timestamp": 5})
    assert store.read("alice") == {"timestamp": 5}
    assert store.read("bob") is None


def test_subscribe_delivers_current_value_and_changes(tmp_path):
    store = DocumentStore(tmp_path / "remote.db")
    store.write("alice", {"timestamp": 1})
    seen = []

    unsubscribe = store.subscribe("alice", seen.append)
    store.write("alice", {"timestamp": 2})
    store.write("bob", {"timestamp": 99})
    unsubscribe()
    store.write("alice", {"timestamp": 3})

    assert seen == [{"timestamp": 1}, {"timestamp": 2}]


def test_user_document_path_validation():
    assert user_document_path(" abc ") == "users-data/abc"
    with pytest.raises(ValueError):
        user_document_path("")
    with pytest.raises(ValueError):
        user_document_path("a/b")
