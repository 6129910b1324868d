# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Secret key generation/decoding
- Keyed username hashes and signed, self-verifying session tokens
- Password hashing/verification (argon2)
- User store loading from data/users.yml
- Login attempt throttling
"""

from dashauth.auth.errors import (
    AuthError,
    ExpiredTokenError,
    InvalidSignatureError,
    KeyGenerationError,
    MalformedTokenError,
    SecretKeyError,
    SessionTokenError,
    TokenGenerationError,
)
from dashauth.auth.secret_key import SECRET_KEY_LENGTH, decode_secret_key, make_secret_key
from dashauth.auth.tokens import (
    AUTH_TOKEN_REGEN_BEFORE,
    AUTH_TOKEN_VALID_PERIOD,
    SessionVerification,
    compute_username_hash,
    generate_session_token,
    verify_session_token,
)

__all__ = [
    "AUTH_TOKEN_REGEN_BEFORE",
    "AUTH_TOKEN_VALID_PERIOD",
    "SECRET_KEY_LENGTH",
    "AuthError",
    "ExpiredTokenError",
    "InvalidSignatureError",
    "KeyGenerationError",
    "MalformedTokenError",
    "SecretKeyError",
    "SessionTokenError",
    "SessionVerification",
    "TokenGenerationError",
    "compute_username_hash",
    "decode_secret_key",
    "generate_session_token",
    "make_secret_key",
    "verify_session_token",
]
