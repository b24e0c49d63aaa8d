import pytest

from app.config import Settings, create_app


def test_settings_defaults(monkeypatch):
    for name in ("PORT", "MAX_RETRIES", "RETRY_INTERVAL", "SESSION_DIR", "AUTO_CONNECT"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.port == 3000
    assert settings.max_retries == 6
    assert settings.retry_interval == 5.0
    assert settings.session_dir == "session"
    assert settings.auto_connect is True


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("MAX_RETRIES", "3")
    monkeypatch.setenv("RETRY_INTERVAL", "1.5")
    monkeypatch.setenv("AUTO_CONNECT", "false")

    settings = Settings.from_env()

    assert settings.port == 8080
    assert settings.max_retries == 3
    assert settings.retry_interval == 1.5
    assert settings.auto_connect is False


def test_invalid_settings_fail_fast(monkeypatch):
    monkeypatch.setenv("MAX_RETRIES", "0")
    with pytest.raises(ValueError):
        Settings.from_env()

    monkeypatch.setenv("MAX_RETRIES", "six")
    with pytest.raises(ValueError):
        Settings.from_env()


def test_create_app_builds_supervisor_from_settings(tmp_path):
    settings = Settings(session_dir=str(tmp_path / "session"), max_retries=4, auto_connect=False)

    app = create_app(settings=settings)
    supervisor = app.state.supervisor

    assert supervisor.retry_budget.max == 4
    assert supervisor.session_store.directory == settings.session_dir
    # command router is subscribed to inbound messages
    assert len(supervisor._message_listeners) == 1
