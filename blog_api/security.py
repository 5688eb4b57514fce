"""
Token codec and password hashing.

Tokens are HS256 JWTs carrying the user id in `sub`. Verification is a pure
function of (token, secret): no session table, no store lookup, so any API
instance can validate any token. The price is that a token cannot be revoked
before it expires, which is why expiry is on by default.

Passwords are stored as salted PBKDF2-SHA256 hashes via passlib.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from blog_api.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class InvalidToken(Exception):
    """Raised for any token that fails verification (bad signature, malformed, expired)."""


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    expires_at: Optional[datetime] = None


def issue_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    secret: Optional[str] = None,
) -> str:
    now = datetime.now(timezone.utc)
    claims: dict = {"sub": subject, "iat": now}

    if expires_delta is None and settings.access_token_expire_minutes > 0:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    if expires_delta is not None:
        claims["exp"] = now + expires_delta

    return jwt.encode(
        claims,
        secret or settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def verify_token(token: str, secret: Optional[str] = None) -> TokenClaims:
    try:
        payload = jwt.decode(
            token,
            secret or settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub"]},
        )
    except jwt.InvalidTokenError as exc:
        raise InvalidToken(str(exc)) from exc

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise InvalidToken("token subject is empty")

    exp = payload.get("exp")
    expires_at = datetime.fromtimestamp(exp, tz=timezone.utc) if exp is not None else None
    return TokenClaims(subject=subject, expires_at=expires_at)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> tuple[bool, Optional[str]]:
    """
    Check `password` against a stored hash.

    Returns (valid, new_hash). new_hash is set when the stored hash uses
    deprecated parameters and should be replaced.
    """
    return pwd_context.verify_and_update(password, password_hash)
