"""
Token issuance and verification.

Tokens are HS256 JWTs carrying the caller id in `sub`. Their format is owned by
PyJWT; the rest of the service only sees `issue_token` / `verify_token`.
"""

from __future__ import annotations

import time

import jwt

from core import config

DEV_SECRET = "dev-change-this-secret"


class AuthSecurityError(RuntimeError):
    pass


def jwt_secret() -> str:
    # In production, set JWT_SECRET in environment.
    return config.env_str("JWT_SECRET", DEV_SECRET)


def jwt_algorithm() -> str:
    return config.env_str("JWT_ALG", "HS256")


def access_token_expire_minutes() -> int:
    return config.env_int("ACCESS_TOKEN_EXPIRE_MIN", 15)


def now_epoch_s() -> int:
    return int(time.time())


def issue_token(user_id: str) -> str:
    subject = (user_id or "").strip()
    if not subject:
        raise AuthSecurityError("User ID is empty.")

    issued_at = now_epoch_s()
    payload = {
        "sub": subject,
        "iat": issued_at,
        "exp": issued_at + (access_token_expire_minutes() * 60),
    }
    try:
        return jwt.encode(payload, jwt_secret(), algorithm=jwt_algorithm())
    except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as exc:
        raise AuthSecurityError("Failed to sign access token.") from exc


def verify_token(token: str) -> str:
    """
    Return the caller id bound to `token`.

    Raises AuthSecurityError when the token is empty, badly signed, expired
    or has no subject.
    """
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(
            raw,
            jwt_secret(),
            algorithms=[jwt_algorithm()],
            options={"require": ["exp", "sub"]},
        )
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    subject = str(payload.get("sub") or "").strip()
    if not subject:
        raise AuthSecurityError("Invalid access token subject.")
    return subject
