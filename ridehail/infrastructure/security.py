"""
Password hashing and bearer-token encoding.

Passwords are stored as ``pbkdf2_sha256$<iterations>$<salt>$<hash>``.
Tokens are HS256 JWTs whose ``jti`` is recorded in ``access_tokens`` so a
token can be revoked before it expires.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
import uuid
from typing import Optional

from jose import JWTError, jwt

from ridehail.config import settings

_ALGORITHM = "pbkdf2_sha256"
_ITERATIONS = 260_000


def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), _ITERATIONS
    )
    encoded = base64.b64encode(digest).decode()
    return f"{_ALGORITHM}${_ITERATIONS}${salt}${encoded}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        algorithm, iterations, salt, encoded = password_hash.split("$", 3)
    except ValueError:
        return False
    if algorithm != _ALGORITHM:
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), int(iterations)
    )
    return hmac.compare_digest(base64.b64encode(digest).decode(), encoded)


def new_token_id() -> str:
    return uuid.uuid4().hex


def create_access_token(user_id: int, jti: str) -> str:
    exp = int(time.time()) + settings.access_token_ttl_seconds
    payload = {"sub": str(user_id), "jti": jti, "exp": exp}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[dict]:
    """Return the claims, or ``None`` if the signature or expiry is bad."""
    try:
        return jwt.decode(
            token, settings.secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        return None
