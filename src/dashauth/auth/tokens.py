# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Self-verifying session tokens.

A token is the standard base64 encoding of a fixed 72 byte structure::

    expiry (8, unsigned big-endian unix seconds) | username hash (32) | signature (32)

The signature is HMAC-SHA256 over ``expiry | username hash`` only. Nothing is
stored server side: a token is valid because its signature checks out against
the current secret and its expiry is not in the past.

Two independent keys are derived from the process secret (HMAC key
derivation with distinct salts), one for username hashes and one for token
signatures, so the raw secret is never used as a MAC key for two purposes.

The current time is always passed in by the caller.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import math
import struct
from datetime import datetime, timedelta
from typing import NamedTuple

from itsdangerous.signer import HMACAlgorithm, Signer

from dashauth.auth.errors import (
    ExpiredTokenError,
    InvalidSignatureError,
    MalformedTokenError,
    TokenGenerationError,
)
from dashauth.auth.secret_key import ensure_secret_key

AUTH_TOKEN_VALID_PERIOD = timedelta(days=14)
AUTH_TOKEN_REGEN_BEFORE = timedelta(days=2)

if not timedelta(0) < AUTH_TOKEN_REGEN_BEFORE < AUTH_TOKEN_VALID_PERIOD:
    raise RuntimeError("AUTH_TOKEN_REGEN_BEFORE must be between 0 and AUTH_TOKEN_VALID_PERIOD")

EXPIRY_LENGTH = 8
USERNAME_HASH_LENGTH = 32
SIGNATURE_LENGTH = 32
PAYLOAD_LENGTH = EXPIRY_LENGTH + USERNAME_HASH_LENGTH
TOKEN_LENGTH = PAYLOAD_LENGTH + SIGNATURE_LENGTH
# TOKEN_LENGTH is a multiple of 3, so the encoding carries no padding.
ENCODED_TOKEN_LENGTH = 4 * TOKEN_LENGTH // 3

_EXPIRY = struct.Struct(">Q")

_USERNAME_HASH_SALT = b"dashauth.username-hash.v1"
_SESSION_TOKEN_SALT = b"dashauth.session-token.v1"

_HMAC = HMACAlgorithm(hashlib.sha256)


class SessionVerification(NamedTuple):
    """Result of a successful verification.

    ``should_regenerate`` is advisory: the token is still valid, but it is
    inside the trailing AUTH_TOKEN_REGEN_BEFORE window and the caller should
    issue a replacement.
    """

    username_hash: bytes
    should_regenerate: bool


class DecodedToken(NamedTuple):
    expiry: int
    username_hash: bytes
    signature: bytes
    payload: bytes


def _derive_key(secret: bytes, salt: bytes) -> bytes:
    signer = Signer(secret, salt=salt, key_derivation="hmac", digest_method=hashlib.sha256)
    return signer.derive_key()


def compute_username_hash(username: str, secret: bytes) -> bytes:
    """Keyed, deterministic 32 byte identifier for ``username``."""
    secret = ensure_secret_key(secret)
    key = _derive_key(secret, _USERNAME_HASH_SALT)
    return _HMAC.get_signature(key, username.encode("utf-8"))


def _sign(payload: bytes, secret: bytes) -> bytes:
    return _HMAC.get_signature(_derive_key(secret, _SESSION_TOKEN_SALT), payload)


def _pack_expiry(expiry: int) -> bytes:
    try:
        return _EXPIRY.pack(expiry)
    except struct.error as exc:
        raise TokenGenerationError("expiry does not fit the token layout") from exc


def encode_token(expiry: int, username_hash: bytes, signature: bytes) -> str:
    if len(username_hash) != USERNAME_HASH_LENGTH or len(signature) != SIGNATURE_LENGTH:
        raise TokenGenerationError("username hash and signature must be 32 bytes")
    return base64.b64encode(_pack_expiry(expiry) + username_hash + signature).decode("ascii")


def decode_token(token: str) -> DecodedToken:
    """Split a token into its fields. Does NOT check the signature."""
    if not isinstance(token, str):
        raise MalformedTokenError("session token must be a string")
    # One accepted spelling per token: extra "=" padding is rejected here.
    if len(token) != ENCODED_TOKEN_LENGTH:
        raise MalformedTokenError("session token has the wrong length")
    try:
        raw = base64.b64decode(token, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedTokenError("session token is not valid base64") from exc
    if len(raw) != TOKEN_LENGTH:
        raise MalformedTokenError("session token has the wrong length")

    (expiry,) = _EXPIRY.unpack_from(raw)
    return DecodedToken(
        expiry=expiry,
        username_hash=raw[EXPIRY_LENGTH:PAYLOAD_LENGTH],
        signature=raw[PAYLOAD_LENGTH:],
        payload=raw[:PAYLOAD_LENGTH],
    )


def generate_session_token(username: str, secret: bytes, now: datetime) -> str:
    secret = ensure_secret_key(secret)
    expiry = math.floor(now.timestamp()) + int(AUTH_TOKEN_VALID_PERIOD.total_seconds())
    username_hash = compute_username_hash(username, secret)
    signature = _sign(_pack_expiry(expiry) + username_hash, secret)
    return encode_token(expiry, username_hash, signature)


def verify_session_token(token: str, secret: bytes, now: datetime) -> SessionVerification:
    """Check ``token`` against ``secret`` at instant ``now``.

    Raises MalformedTokenError, InvalidSignatureError or ExpiredTokenError.
    The signature is checked (in constant time) before the expiry is trusted.
    """
    secret = ensure_secret_key(secret)
    decoded = decode_token(token)

    key = _derive_key(secret, _SESSION_TOKEN_SALT)
    if not _HMAC.verify_signature(key, decoded.payload, decoded.signature):
        raise InvalidSignatureError("session token signature mismatch")

    now_ts = now.timestamp()
    if now_ts > decoded.expiry:
        raise ExpiredTokenError("session token expired")

    regen_after = decoded.expiry - AUTH_TOKEN_REGEN_BEFORE.total_seconds()
    return SessionVerification(decoded.username_hash, now_ts > regen_after)
