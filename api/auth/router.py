"""
Token issuing endpoint.

The caller supplies `User-ID` and `Password` headers and gets back a signed
access token bound to that user id. Passwords are not checked here.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Header, HTTPException, status
from pydantic import BaseModel

from . import security

logger = logging.getLogger(__name__)

router = APIRouter()


class TokenResponse(BaseModel):
    token: str


@router.api_route("/authentication", methods=["GET", "POST"])
async def authenticate(
    user_id: str | None = Header(default=None, alias="User-ID"),
    password: str | None = Header(default=None, alias="Password"),
) -> TokenResponse:
    user_id = (user_id or "").strip()
    password = password or ""
    if not user_id or not password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing credentials",
        )

    try:
        token = security.issue_token(user_id)
    except security.AuthSecurityError as exc:
        logger.error("token_issue_failed user_id=%s error=%s", user_id, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate token",
        ) from exc

    logger.info("token_issued user_id=%s", user_id)
    return TokenResponse(token=token)
