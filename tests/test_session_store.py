"""
Tests for the persisted session — finance_tracker/session_store.py
"""

import json
import os

import pytest

from finance_tracker.models import PLACEHOLDER_TOKEN, Identity
from finance_tracker.session_store import SessionStore, is_client_key, new_client_key


def _write_raw(store, text):
    os.makedirs(store.directory, exist_ok=True)
    with open(store.path, "w", encoding="utf-8") as f:
        f.write(text)


class TestSessionStore:
    def test_missing_file_is_absent(self, store):
        assert store.load() is None

    def test_save_then_load(self, store):
        store.save(Identity(id="u1", username="alice"))
        loaded = store.load()
        assert loaded == Identity(id="u1", username="alice", token=PLACEHOLDER_TOKEN)

    def test_save_overwrites(self, store):
        store.save(Identity(id="u1", username="alice"))
        store.save(Identity(id="u2", username="bob"))
        assert store.load().username == "bob"

    def test_save_creates_directory(self, tmp_path):
        store = SessionStore(new_client_key(), str(tmp_path / "nested" / "dir"))
        store.save(Identity(id="u1", username="alice"))
        assert store.load().id == "u1"

    def test_clear(self, store):
        store.save(Identity(id="u1", username="alice"))
        store.clear()
        assert store.load() is None

    def test_clear_without_file(self, store):
        store.clear()
        store.clear()
        assert store.load() is None


class TestClientKeys:
    def test_new_keys_are_unique_and_valid(self):
        first, second = new_client_key(), new_client_key()
        assert first != second
        assert is_client_key(first) and is_client_key(second)

    @pytest.mark.parametrize("value", [None, "", "abc", "../../etc/passwd", "G" * 32, "a" * 33])
    def test_rejects_malformed_keys(self, value, tmp_path):
        assert not is_client_key(value)
        with pytest.raises(ValueError):
            SessionStore(value, str(tmp_path))

    def test_record_is_named_after_key(self, tmp_path):
        key = new_client_key()
        store = SessionStore(key, str(tmp_path))
        assert store.path == os.path.join(str(tmp_path), f"{key}.json")

    def test_clients_keep_separate_records(self, tmp_path):
        alice = SessionStore(new_client_key(), str(tmp_path))
        bob = SessionStore(new_client_key(), str(tmp_path))
        alice.save(Identity(id="u1", username="alice"))
        assert bob.load() is None

        bob.save(Identity(id="u2", username="bob"))
        bob.clear()
        assert alice.load().username == "alice"


class TestFailOpen:
    def test_corrupt_json(self, store):
        _write_raw(store, "{not json")
        assert store.load() is None

    def test_partial_identity(self, store):
        _write_raw(store, json.dumps({"id": "u1", "username": "alice"}))
        assert store.load() is None

    def test_wrong_type(self, store):
        _write_raw(store, json.dumps(["u1", "alice"]))
        assert store.load() is None

    def test_numeric_id_normalized(self, store):
        _write_raw(store, json.dumps({"id": 7, "username": "alice", "token": "t"}))
        assert store.load().id == "7"
