"""Bearer-token authentication helpers for API routes."""

from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, Request, status

from .config import Settings
from .constants import ADMIN_ROLE, USER_ROLE

logger = logging.getLogger("currency_gateway.auth")


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_caller_role(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_app_settings),
) -> str:
    if not settings.auth_enabled:
        return ADMIN_ROLE
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token_value = authorization.split(" ", 1)[1].strip()
    role = settings.api_tokens.get(token_value)
    if role is None:
        logger.info("rejected unknown bearer token")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return role


async def require_user(role: str = Depends(get_caller_role)) -> str:
    if role not in (USER_ROLE, ADMIN_ROLE):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User role required")
    return role


async def require_admin(role: str = Depends(get_caller_role)) -> str:
    if role != ADMIN_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return role


__all__ = ["get_caller_role", "require_user", "require_admin"]
