# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""dashauth entrypoint.

Run with:
  python -m dashauth                   serve the dashboard
  python -m dashauth secret:make       print a new random secret key
  python -m dashauth password:hash PWD print an argon2 hash of PWD
  python -m dashauth user:add          add/update a user in users.yml
"""

from __future__ import annotations

import argparse
import logging
import sys
from getpass import getpass
from pathlib import Path
from typing import List, Optional

import uvicorn
import yaml

from dashauth.auth.errors import AuthError
from dashauth.auth.passwords import hash_password
from dashauth.auth.secret_key import SECRET_KEY_LENGTH, make_secret_key
from dashauth.auth.users import DEFAULT_USERS_PATH
from dashauth.config import Settings

logger = logging.getLogger("dashauth")


def setup_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def serve() -> None:
    settings = Settings.from_env()
    uvicorn.run(
        "dashauth.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )


def add_user(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    else:
        raw = {"version": 1, "users": {}}

    if "users" not in raw or not isinstance(raw["users"], dict):
        raw["users"] = {}

    username = input("Username: ").strip()
    if not username:
        raise SystemExit("Username is required")
    active_in = input("Active? [Y/n]: ").strip().lower()

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    raw["users"][username] = {
        "active": active_in != "n",
        "password_hash": hash_password(pw1),
    }
    path.write_text(yaml.safe_dump(raw, sort_keys=True, allow_unicode=True), encoding="utf-8")
    print(f"OK: user '{username}' saved to {path}")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="dashauth")
    sub = p.add_subparsers(dest="cmd")
    sub.add_parser("serve", help="Run the dashboard (default)")
    sub.add_parser("secret:make", help="Generate a random secret key")
    ph = sub.add_parser("password:hash", help="Hash a password")
    ph.add_argument("password")
    ua = sub.add_parser("user:add", help="Add or update a user")
    ua.add_argument("--users-file", type=Path, default=None)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)

    try:
        if args.cmd in (None, "serve"):
            serve()
        elif args.cmd == "secret:make":
            print(make_secret_key(SECRET_KEY_LENGTH))
        elif args.cmd == "password:hash":
            print(hash_password(args.password))
        elif args.cmd == "user:add":
            add_user(args.users_file or DEFAULT_USERS_PATH)
    except (AuthError, ValueError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
