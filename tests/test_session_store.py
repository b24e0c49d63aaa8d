import os

from app.whatsapp import SessionStore


def test_clear_removes_directory(session_store):
    assert session_store.exists()

    assert session_store.clear() is True
    assert not os.path.exists(session_store.directory)
    assert session_store.exists() is False


def test_clear_missing_directory_is_noop(tmp_path):
    store = SessionStore(str(tmp_path / "missing"))

    assert store.clear() is False


def test_ensure_and_database_path(tmp_path):
    store = SessionStore(str(tmp_path / "session"))
    store.ensure()

    assert os.path.isdir(store.directory)
    assert not store.exists()
    assert store.database_path == os.path.join(store.directory, "neonize.sqlite3")
