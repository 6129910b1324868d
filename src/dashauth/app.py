# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from dashauth.auth.rate_limit import LoginRateLimiter
from dashauth.auth.tokens import generate_session_token
from dashauth.auth.users import UserDirectory
from dashauth.config import Settings
from dashauth.permissions import (
    AuthContext,
    authenticate_request,
    client_host,
    get_auth,
    require_user,
    safe_next,
    set_session_cookie,
    sets_session_cookie,
    utcnow,
)

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

router = APIRouter()


def _render(request: Request, template_name: str, ctx: dict, status_code: int = 200, headers: Optional[dict] = None):
    """TemplateResponse wrapper injecting the current user."""
    base_ctx = {"current_user": getattr(request.state, "user", None)}
    merged = {**base_ctx, **(ctx or {})}
    return templates.TemplateResponse(request, template_name, merged, status_code=status_code, headers=headers)


# ------------------ Routes ------------------


@router.get("/healthz", response_class=PlainTextResponse)
def healthz():
    return "ok"


@router.get("/login", response_class=HTMLResponse)
def login_get(request: Request, next: str = "/"):
    if getattr(request.state, "user", None):
        return RedirectResponse(url=safe_next(next), status_code=303)
    return _render(request, "login.html", {"next": next, "error": ""})


@router.post("/login")
def login_post(
    request: Request,
    username: str = Form(...),
    password: str = Form(...),
    next: str = Form("/"),
):
    ctx = get_auth(request)
    now = utcnow()
    client = client_host(request)

    retry_after = ctx.limiter.acquire(client, now)
    if retry_after is not None:
        logger.warning("login from %s throttled for %ss", client, retry_after)
        return _render(
            request,
            "login.html",
            {"next": next, "error": "Too many failed attempts, try again later"},
            status_code=429,
            headers={"Retry-After": str(retry_after)},
        )

    u = ctx.users.authenticate(username=username, password=password)
    if not u:
        logger.info("failed login from %s", client)
        return _render(request, "login.html", {"next": next, "error": "Invalid credentials"}, status_code=401)

    ctx.limiter.reset(client)
    token = generate_session_token(u.username, ctx.settings.secret_key, now)
    resp = RedirectResponse(url=safe_next(next), status_code=303)
    set_session_cookie(resp, ctx, token)
    logger.info("user logged in from %s", client)
    return resp


@router.post("/logout")
def logout_post(request: Request):
    ctx = get_auth(request)
    resp = RedirectResponse(url="/login", status_code=303)
    resp.delete_cookie(ctx.settings.cookie_name)
    return resp


@router.get("/", response_class=HTMLResponse)
def home(request: Request, user=Depends(require_user)):
    return _render(request, "index.html", {"user": user})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    ctx = AuthContext(
        settings=settings,
        users=UserDirectory.from_file(settings.secret_key, settings.users_path),
        limiter=LoginRateLimiter(),
    )

    app = FastAPI()
    app.state.auth = ctx

    @app.middleware("http")
    async def _auth_middleware(request: Request, call_next):
        result = authenticate_request(request, utcnow())
        request.state.user = result.user
        response = await call_next(request)
        # Login and logout write the cookie themselves; never override them.
        if result.refreshed_token and not sets_session_cookie(response, ctx):
            set_session_cookie(response, ctx, result.refreshed_token)
        return response

    app.include_router(router)
    return app
