"""Security helpers for password hashing and session token generation."""

from __future__ import annotations

import secrets

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

SALT_BYTES = 32
SESSION_TOKEN_BYTES = 32


def generate_salt() -> bytes:
    """Return a fresh per-user salt stored next to the password hash."""

    return secrets.token_bytes(SALT_BYTES)


def _salted(password: str, salt: bytes) -> str:
    return password + salt.hex()


def get_password_hash(password: str, salt: bytes) -> str:
    """Hash a password combined with the user's stored salt."""

    if not password:
        raise ValueError("Password cannot be empty.")
    if not salt:
        raise ValueError("Salt cannot be empty.")
    return pwd_context.hash(_salted(password, salt))


def verify_password(plain_password: str, hashed_password: str, salt: bytes) -> bool:
    """Verify a plain password against its hashed counterpart."""

    return pwd_context.verify(_salted(plain_password, salt), hashed_password)


def generate_session_token() -> str:
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)
