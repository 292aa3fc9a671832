import pytest

from multitaskos.state_store import STORAGE_KEY, LocalStateStore, StateDecodeError


def test_round_trip_state(tmp_path):
    store = LocalStateStore(tmp_path / "local.db")
    assert store.load_state() is None

    store.save_state({"jobQueue": [], "timestamp": 42})
    assert store.load_state() == {"jobQueue": [], "timestamp": 42}
    assert store.get_item(STORAGE_KEY) is not None


def test_state_survives_reopen(tmp_path):
    path = tmp_path / "local.db"
    LocalStateStore(path).save_state({"jobQueue": [], "timestamp": 7})
    assert LocalStateStore(path).load_state()["timestamp"] == 7


def test_custom_key_is_isolated(tmp_path):
    path = tmp_path / "local.db"
    LocalStateStore(path).save_state({"timestamp": 1})
    other = LocalStateStore(path, key="other")
    assert other.load_state() is None


def test_malformed_content_raises_decode_error(tmp_path):
    store = LocalStateStore(tmp_path / "local.db")
    store.set_item(STORAGE_KEY, "{not json")
    with pytest.raises(StateDecodeError):
        store.load_state()

    store.set_item(STORAGE_KEY, "[1, 2, 3]")
    with pytest.raises(StateDecodeError):
        store.load_state()


def test_null_and_clear_read_as_no_data(tmp_path):
    store = LocalStateStore(tmp_path / "local.db")
    store.set_item(STORAGE_KEY, "null")
    assert store.load_state() is None

    store.save_state({"timestamp": 1})
    store.clear()
    assert store.load_state() is None
