import logging

import pytest

from dashauth.auth.errors import SecretKeyError
from dashauth.auth.secret_key import SECRET_KEY_LENGTH, decode_secret_key, make_secret_key
from dashauth.config import Settings


def test_from_env_reads_secret_and_flags(monkeypatch, tmp_path):
    value = make_secret_key()
    monkeypatch.setenv("DASHAUTH_SECRET_KEY", value)
    monkeypatch.setenv("DASHAUTH_USERS_PATH", str(tmp_path / "users.yml"))
    monkeypatch.setenv("DASHAUTH_COOKIE_SECURE", "yes")
    monkeypatch.setenv("DASHAUTH_PORT", "9000")

    s = Settings.from_env()
    assert s.secret_key == decode_secret_key(value)
    assert s.users_path == (tmp_path / "users.yml").resolve()
    assert s.cookie_secure is True
    assert s.port == 9000
    assert s.cookie_settings() == {"httponly": True, "samesite": "lax", "secure": True}


def test_missing_secret_generates_one(monkeypatch, caplog):
    monkeypatch.delenv("DASHAUTH_SECRET_KEY", raising=False)
    with caplog.at_level(logging.WARNING, logger="dashauth.config"):
        s = Settings.from_env()
    assert len(s.secret_key) == SECRET_KEY_LENGTH
    assert "DASHAUTH_SECRET_KEY" in caplog.text


def test_malformed_secret_fails_startup(monkeypatch):
    monkeypatch.setenv("DASHAUTH_SECRET_KEY", "dG9vIHNob3J0")
    with pytest.raises(SecretKeyError):
        Settings.from_env()


def test_repr_hides_secret():
    s = Settings(secret_key=b"\x07" * SECRET_KEY_LENGTH)
    assert "secret_key" not in repr(s)
