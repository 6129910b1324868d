# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import base64
import binascii
import secrets

from dashauth.auth.errors import KeyGenerationError, SecretKeyError

SECRET_KEY_LENGTH = 32


def make_secret_key(length: int = SECRET_KEY_LENGTH) -> str:
    """Return ``length`` random bytes from the OS CSPRNG, base64 encoded."""
    if length <= 0:
        raise ValueError("length must be positive")
    try:
        raw = secrets.token_bytes(length)
    except (OSError, NotImplementedError) as exc:
        raise KeyGenerationError("secure random source unavailable") from exc
    return base64.b64encode(raw).decode("ascii")


def decode_secret_key(value: str) -> bytes:
    """Decode a stored base64 secret, enforcing SECRET_KEY_LENGTH."""
    try:
        raw = base64.b64decode((value or "").strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SecretKeyError("secret key is not valid base64") from exc
    return ensure_secret_key(raw)


def ensure_secret_key(secret: bytes) -> bytes:
    # bytearray/memoryview are copied so later mutation by the caller cannot
    # leak into derived keys.
    if isinstance(secret, (bytearray, memoryview)):
        secret = bytes(secret)
    if not isinstance(secret, bytes):
        raise SecretKeyError("secret key must be bytes")
    if len(secret) != SECRET_KEY_LENGTH:
        raise SecretKeyError(f"secret key must be exactly {SECRET_KEY_LENGTH} bytes")
    return secret
