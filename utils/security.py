"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT
- JTI generation for token identifiers

Signing helpers take their secret/expiry explicitly so they can be used
outside an application context (services, tests).
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError

ph = PasswordHasher()

TOKEN_TYPES = ("access", "refresh")


class TokenError(Exception):
    """Raised when a JWT cannot be decoded or has the wrong type."""


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    if not password or not password_hash:
        return False
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False

def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())

def _now() -> datetime:
    return datetime.now(timezone.utc)

def create_token(
    subject: str,
    token_type: str,
    secret: str,
    expires: timedelta,
    algorithm: str = "HS256",
    issuer: str = "user-session-api",
    claims: Optional[Dict[str, Any]] = None,
    jti: Optional[str] = None,
) -> str:
    """
    Sign a JWT of the given type ("access" or "refresh") for `subject`.
    Extra `claims` are merged in but cannot override the registered ones.
    """
    if token_type not in TOKEN_TYPES:
        raise ValueError(f"Unknown token type: {token_type}")
    now = _now()
    payload = dict(claims or {})
    payload.update(
        {
            "iss": issuer,
            "sub": str(subject),
            "iat": int(now.timestamp()),
            "exp": int((now + expires).timestamp()),
            "type": token_type,
            "jti": jti or generate_jti(),
        }
    )
    return jwt.encode(payload, secret, algorithm=algorithm)

def decode_token(
    token: str,
    secret: str,
    expected_type: str = "access",
    algorithm: str = "HS256",
) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises TokenError on invalid signature/expired jwt
    expected type must be "access" or "refresh".
    """
    try:
        decoded = jwt.decode(
            token, secret, algorithms=[algorithm], options={"require": ["exp", "sub"]}
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token expired")
    except jwt.InvalidTokenError as exc:
        raise TokenError(f"Invalid token: {exc}")

    if decoded.get("type") != expected_type:
        raise TokenError("Wrong token type")
    return decoded
