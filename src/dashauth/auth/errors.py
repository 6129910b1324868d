# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations


class AuthError(Exception):
    """Base class for every error raised by dashauth.auth."""


class KeyGenerationError(AuthError):
    """The operating system's secure random source is unavailable."""


class SecretKeyError(AuthError, ValueError):
    """The secret key is not valid base64 or has the wrong length."""


class TokenGenerationError(AuthError):
    """A session token could not be built from the given inputs."""


class SessionTokenError(AuthError):
    """Base class for session token verification failures.

    Callers must treat every subclass the same way (deny access). ``kind`` is
    meant for server-side logs only.
    """

    kind = "invalid"


class MalformedTokenError(SessionTokenError):
    kind = "malformed"


class InvalidSignatureError(SessionTokenError):
    kind = "invalid-signature"


class ExpiredTokenError(SessionTokenError):
    kind = "expired"
