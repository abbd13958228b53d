# Tests for api/token_store.py
# Created: 2026-10-19

import json
import stat
from datetime import UTC, datetime, timedelta

import pytest

from togethertax.api.token_store import (
    FileTokenStore,
    MemoryTokenStore,
    StoredToken,
    token_lifetime,
)

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)


@pytest.fixture
def store(tmp_path):
    return FileTokenStore(tmp_path / "session.json")


class TestStoredToken:
    def test_lifetimes(self):
        assert token_lifetime(True) == timedelta(days=7)
        assert token_lifetime(False) == timedelta(minutes=15)

    def test_issue_remember_me(self):
        token = StoredToken.issue("a", remember_me=True, now=NOW)
        assert token.expiration == NOW + timedelta(days=7)
        assert token.remember_me is True

    def test_issue_default_is_short_lived(self):
        token = StoredToken.issue("a", now=NOW)
        assert token.expiration == NOW + timedelta(minutes=15)
        assert token.remember_me is False


class TestMemoryTokenStore:
    def test_roundtrip_and_clear(self):
        store = MemoryTokenStore()
        assert store.read() is None
        store.write(StoredToken.issue("a"))
        store.write_user({"id": 1})
        assert store.read().access_token == "a"
        store.clear()
        assert store.read() is None
        assert store.read_user() is None


class TestFileTokenStore:
    def test_save_and_load(self, store):
        store.write(StoredToken.issue("access123", remember_me=True, now=NOW))

        loaded = store.read()
        assert loaded is not None
        assert loaded.access_token == "access123"
        assert loaded.remember_me is True
        assert loaded.expiration == NOW + timedelta(days=7)

    def test_storage_keys(self, store):
        store.write(StoredToken.issue("abc", now=NOW))
        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert data["accessToken"] == "abc"
        assert data["tokenExpiration"] == (NOW + timedelta(minutes=15)).isoformat()
        assert data["rememberMe"] == "false"

    def test_load_nonexistent(self, store):
        assert store.read() is None
        assert store.read_user() is None

    def test_corrupt_file_reads_empty(self, store):
        store.path.write_text("{not json", encoding="utf-8")
        assert store.read() is None

    def test_user_profile(self, store):
        store.write_user({"name": "홍길동", "email": "hong@example.com"})
        assert store.read_user() == {"name": "홍길동", "email": "hong@example.com"}

    def test_clear_removes_everything(self, store):
        store.write(StoredToken.issue("abc"))
        store.write_user({"name": "x"})
        store.clear()
        assert store.read() is None
        assert store.read_user() is None
        assert not store.path.exists()

    def test_clear_keeps_unrelated_keys(self, store):
        store.path.write_text(json.dumps({"theme": "dark", "accessToken": "a"}), encoding="utf-8")
        store.clear()
        assert json.loads(store.path.read_text(encoding="utf-8")) == {"theme": "dark"}

    def test_file_permissions(self, store):
        store.write(StoredToken.issue("secret"))
        mode = store.path.stat().st_mode
        # Owner read+write only
        assert mode & stat.S_IRUSR
        assert mode & stat.S_IWUSR
        assert not (mode & stat.S_IRGRP)
        assert not (mode & stat.S_IROTH)

    def test_default_path_under_config_dir(self, tmp_path, monkeypatch):
        monkeypatch.setattr("togethertax.api.token_store.get_config_dir", lambda: tmp_path)
        assert FileTokenStore().path == tmp_path / "session.json"
