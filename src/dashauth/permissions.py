# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote

from fastapi import HTTPException, Request, Response

from dashauth.auth.errors import SessionTokenError
from dashauth.auth.rate_limit import LoginRateLimiter
from dashauth.auth.tokens import AUTH_TOKEN_VALID_PERIOD, generate_session_token, verify_session_token
from dashauth.auth.users import UserDirectory
from dashauth.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Everything the HTTP layer needs to authenticate; built once per app."""

    settings: Settings
    users: UserDirectory
    limiter: LoginRateLimiter


@dataclass(frozen=True)
class CurrentUser:
    username: str


@dataclass(frozen=True)
class RequestAuth:
    user: Optional[CurrentUser]
    refreshed_token: Optional[str] = None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_auth(request: Request) -> AuthContext:
    return request.app.state.auth


def client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def authenticate_request(request: Request, now: datetime) -> RequestAuth:
    ctx = get_auth(request)
    token = request.cookies.get(ctx.settings.cookie_name, "")
    if not token:
        return RequestAuth(user=None)

    try:
        username_hash, should_regenerate = verify_session_token(token, ctx.settings.secret_key, now)
    except SessionTokenError as exc:
        # The kind stays in the server log; clients only see "not logged in".
        logger.info("rejected session token from %s: %s", client_host(request), exc.kind)
        return RequestAuth(user=None)

    u = ctx.users.by_username_hash(username_hash)
    if not u:
        logger.info("session token from %s names an unknown or inactive user", client_host(request))
        return RequestAuth(user=None)

    refreshed = None
    if should_regenerate:
        refreshed = generate_session_token(u.username, ctx.settings.secret_key, now)
    return RequestAuth(user=CurrentUser(username=u.username), refreshed_token=refreshed)


def current_user_optional(request: Request) -> Optional[CurrentUser]:
    return getattr(request.state, "user", None)


def safe_next(next_url: str) -> str:
    """Only allow same-site relative redirects."""
    n = (next_url or "").strip()
    if not n.startswith("/") or n.startswith("//") or n.startswith("/\\"):
        return "/"
    return n


def require_user(request: Request) -> CurrentUser:
    u = current_user_optional(request)
    if u:
        return u
    next_url = str(request.url.path)
    if request.url.query:
        next_url += "?" + request.url.query
    raise HTTPException(status_code=303, headers={"Location": f"/login?next={quote(next_url, safe='/')}"})


def set_session_cookie(response: Response, ctx: AuthContext, token: str) -> None:
    response.set_cookie(
        ctx.settings.cookie_name,
        token,
        max_age=int(AUTH_TOKEN_VALID_PERIOD.total_seconds()),
        **ctx.settings.cookie_settings(),
    )


def sets_session_cookie(response: Response, ctx: AuthContext) -> bool:
    prefix = f"{ctx.settings.cookie_name}="
    return any(v.startswith(prefix) for v in response.headers.getlist("set-cookie"))
