# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dashauth.auth.secret_key import decode_secret_key, make_secret_key
from dashauth.auth.users import DEFAULT_USERS_PATH

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "y"}


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    secret_key: bytes = field(repr=False)
    users_path: Path = DEFAULT_USERS_PATH
    cookie_name: str = "session_token"
    cookie_secure: bool = False
    host: str = "0.0.0.0"
    port: int = 8080
    reload: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        configured = os.getenv("DASHAUTH_SECRET_KEY", "").strip()
        if configured:
            secret = decode_secret_key(configured)
        else:
            logger.warning(
                "DASHAUTH_SECRET_KEY is not set; using a random key, sessions will not survive a restart"
            )
            secret = decode_secret_key(make_secret_key())

        return cls(
            secret_key=secret,
            users_path=Path(os.getenv("DASHAUTH_USERS_PATH", str(DEFAULT_USERS_PATH))).resolve(),
            cookie_name=os.getenv("DASHAUTH_COOKIE_NAME", "session_token"),
            cookie_secure=_flag("DASHAUTH_COOKIE_SECURE"),
            host=os.getenv("DASHAUTH_HOST", "0.0.0.0"),
            port=int(os.getenv("DASHAUTH_PORT", "8080")),
            reload=_flag("DASHAUTH_RELOAD"),
        )

    def cookie_settings(self) -> dict:
        return {"httponly": True, "samesite": "lax", "secure": self.cookie_secure}
