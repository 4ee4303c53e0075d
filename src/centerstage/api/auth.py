"""Bearer token authentication for admin endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

import jwt
from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from centerstage.api.serializers import user_payload
from centerstage.domain.users import UserRecord  # noqa: TC001
from centerstage.errors import NotFoundError
from centerstage.security import decode_access_token, make_access_token

if TYPE_CHECKING:
    from centerstage.containers import AppContainer

_logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

router = APIRouter(prefix="/auth", tags=["auth"])


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> UserRecord:
    """Resolve the signed-in administrator from the bearer token."""
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    container: AppContainer = request.app.state.container
    try:
        subject = decode_access_token(
            credentials.credentials, container.settings.jwt_secret
        )
        user_id = UUID(subject)
    except (jwt.InvalidTokenError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        ) from exc
    try:
        return container.user_service.get(user_id)
    except NotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found"
        ) from exc


async def require_super_admin(
    user: UserRecord = Depends(get_current_user),
) -> UserRecord:
    """Allow only super admins through."""
    if not user.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin access required",
        )
    return user


@router.post("/login")
async def login(
    request: Request, payload: dict[str, object] = Body(...)
) -> dict[str, object]:
    """Exchange email and password for an access token."""
    container: AppContainer = request.app.state.container
    user = container.user_service.authenticate(
        str(payload.get("email") or ""), str(payload.get("password") or "")
    )
    if user is None:
        _logger.info("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials"
        )
    token = make_access_token(
        str(user.id),
        container.settings.jwt_secret,
        container.settings.jwt_ttl_minutes,
    )
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": user_payload(user),
    }


@router.get("/me")
async def me(user: UserRecord = Depends(get_current_user)) -> dict[str, object]:
    """Return the signed-in administrator."""
    return {"user": user_payload(user)}
