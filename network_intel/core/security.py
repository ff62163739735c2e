"""
Credential helpers shared by the auth layer.

Session tokens are random strings stored only as SHA-256 hashes. Access
tokens are signed JWTs whose hash is also stored, so they can be revoked.
"""

import hashlib
import os
import random
import secrets
import string
from datetime import datetime as dt
from datetime import timedelta as td
from datetime import timezone as tz
from typing import Optional

from dotenv import load_dotenv
from jose import JWTError, jwt

load_dotenv("network_intel/.env")

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-only-jwt-secret")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
ACCESS_TOKEN_EXPIRE_MINUTES = 120

SESSION_EXPIRE_DAYS = 7
SESSION_COOKIE_NAME = "session_token"


def generate_user_id() -> str:
    """Random 6-digit user ID, e.g. "042817"."""
    return "".join(random.choices(string.digits, k=6))


# ================== Sessions ==================

def generate_session_token() -> str:
    return secrets.token_urlsafe(32)


def hash_token(token: str) -> str:
    """Hex SHA-256 of a token; only this form is stored."""
    return hashlib.sha256(token.encode()).hexdigest()


def get_session_expiry() -> dt:
    return dt.now(tz.utc) + td(days=SESSION_EXPIRE_DAYS)


# ================== Access tokens ==================

def create_access_token(user_id: str, expires_delta: Optional[td] = None) -> str:
    """
    Sign a bearer token for API clients.

    Args:
        user_id: Subject of the token
        expires_delta: Lifetime, ACCESS_TOKEN_EXPIRE_MINUTES by default
    """
    issued_at = dt.now(tz.utc)
    claims = {
        "sub": user_id,
        "type": ACCESS_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + (expires_delta or td(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)),
    }
    return jwt.encode(claims, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """Verified claims, or None if the token is forged, expired or not an access token."""
    try:
        claims = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        return None
    if claims.get("type") != ACCESS_TOKEN_TYPE:
        return None
    return claims


def get_token_expiry() -> dt:
    return dt.now(tz.utc) + td(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
