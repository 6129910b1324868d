import base64

import yaml

from dashauth import __main__ as cli
from dashauth.auth.passwords import verify_password
from dashauth.auth.secret_key import SECRET_KEY_LENGTH


def test_secret_make_prints_key(capsys):
    assert cli.main(["secret:make"]) == 0
    out = capsys.readouterr().out.strip()
    assert len(base64.b64decode(out, validate=True)) == SECRET_KEY_LENGTH


def test_password_hash_prints_argon2_hash(capsys):
    assert cli.main(["password:hash", "hunter22"]) == 0
    out = capsys.readouterr().out.strip()
    assert verify_password(out, "hunter22")


def test_user_add_writes_users_file(tmp_path, monkeypatch):
    path = tmp_path / "data" / "users.yml"
    answers = iter(["carol", ""])
    passwords = iter(["pw-1234", "pw-1234"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    monkeypatch.setattr(cli, "getpass", lambda prompt="": next(passwords))

    assert cli.main(["user:add", "--users-file", str(path)]) == 0

    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert raw["users"]["carol"]["active"] is True
    assert verify_password(raw["users"]["carol"]["password_hash"], "pw-1234")


def test_serve_runs_app_factory(monkeypatch):
    calls = {}
    monkeypatch.setenv("DASHAUTH_PORT", "8123")
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kw: calls.update(app=app, **kw))

    assert cli.main(["serve"]) == 0
    assert calls["app"] == "dashauth.app:create_app"
    assert calls["factory"] is True
    assert calls["port"] == 8123
