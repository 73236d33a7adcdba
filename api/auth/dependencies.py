"""
Auth dependencies for protected FastAPI routes.

`get_caller_id` runs before the route body, so an invalid credential ends the
request with 401 and the handler never executes.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, status

from . import security

logger = logging.getLogger(__name__)

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers=_BEARER_CHALLENGE,
    )


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise _unauthorized("Missing Authorization header.")

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise _unauthorized("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise _unauthorized("Authorization must be: Bearer <token>.")
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


async def get_caller_id(access_token: str = Depends(get_bearer_token)) -> str:
    try:
        return security.verify_token(access_token)
    except security.AuthSecurityError as exc:
        logger.info("auth_rejected reason=%s", exc)
        raise _unauthorized(str(exc)) from exc
