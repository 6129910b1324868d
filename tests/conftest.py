import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from datetime import datetime, timezone
from pathlib import Path

import pytest
import yaml

from dashauth.auth.passwords import hash_password
from dashauth.auth.secret_key import decode_secret_key, make_secret_key


@pytest.fixture()
def secret() -> bytes:
    return decode_secret_key(make_secret_key())


@pytest.fixture()
def t0() -> datetime:
    """A fixed instant, whole seconds, so boundary checks are exact."""
    return datetime(2026, 3, 14, 9, 26, 53, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def admin_password_hash() -> str:
    return hash_password("s3cret-pass")


@pytest.fixture()
def users_file(tmp_path: Path, admin_password_hash: str) -> Path:
    """users.yml with active "admin" and "carol" and an inactive "bob" (same password)."""
    path = tmp_path / "data" / "users.yml"
    path.parent.mkdir(parents=True, exist_ok=True)
    raw = {
        "version": 1,
        "users": {
            "admin": {"active": True, "password_hash": admin_password_hash},
            "bob": {"active": False, "password_hash": admin_password_hash},
            "carol": {"active": True, "password_hash": admin_password_hash},
        },
    }
    path.write_text(yaml.safe_dump(raw), encoding="utf-8")
    return path
