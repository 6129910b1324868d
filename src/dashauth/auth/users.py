# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from dashauth.auth.passwords import burn_verification, verify_password
from dashauth.auth.tokens import compute_username_hash

logger = logging.getLogger(__name__)

# Anchor the default users.yml path to the project root (works well with editable installs).
BASE_DIR = Path(__file__).resolve().parents[3]
DEFAULT_USERS_PATH = Path(
    os.getenv("DASHAUTH_USERS_PATH", str(BASE_DIR / "data" / "users.yml"))
).resolve()


@dataclass(frozen=True)
class UserRecord:
    username: str
    active: bool
    password_hash: str


def load_users(path: Path = DEFAULT_USERS_PATH) -> Dict[str, UserRecord]:
    if not path.exists():
        logger.warning("users file %s not found, nobody can log in", path)
        return {}
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    users = (raw.get("users") or {}) if isinstance(raw, dict) else {}
    out: Dict[str, UserRecord] = {}
    for uname, udata in users.items():
        if not isinstance(udata, dict):
            continue
        username = str(uname).strip()
        if not username:
            continue
        out[username] = UserRecord(
            username=username,
            active=bool(udata.get("active", True)),
            password_hash=str(udata.get("password_hash") or "").strip(),
        )
    return out


@dataclass(frozen=True)
class UserDirectory:
    """Configured users, indexed both by name and by keyed username hash.

    A verified session token only carries the username hash; ``by_username_hash``
    maps it back to the user without any session table.
    """

    users: Mapping[str, UserRecord]
    secret: bytes = field(repr=False)
    _by_hash: Mapping[bytes, UserRecord] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        index = {compute_username_hash(name, self.secret): u for name, u in self.users.items()}
        object.__setattr__(self, "_by_hash", index)

    @classmethod
    def from_file(cls, secret: bytes, path: Path = DEFAULT_USERS_PATH) -> "UserDirectory":
        return cls(users=load_users(path), secret=secret)

    def get(self, username: str) -> Optional[UserRecord]:
        u = (username or "").strip()
        if not u:
            return None
        return self.users.get(u)

    def by_username_hash(self, username_hash: bytes) -> Optional[UserRecord]:
        u = self._by_hash.get(username_hash)
        if not u or not u.active:
            return None
        return u

    def authenticate(self, username: str, password: str) -> Optional[UserRecord]:
        u = self.get(username)
        if not u or not u.active:
            burn_verification(password)
            return None
        if not verify_password(u.password_hash, password):
            return None
        return u
