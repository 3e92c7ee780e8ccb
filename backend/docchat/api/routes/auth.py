"""Authentication endpoints - login, signup, logout, session."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel, ConfigDict, Field

from backend.docchat.api.auth import get_current_user
from backend.docchat.api.dependencies import get_app_settings, get_stores
from backend.docchat.config import Settings
from backend.docchat.db.context import RequestContext
from backend.docchat.db.repositories import Stores, UserRecord
from backend.docchat.errors import DuplicateUserError
from backend.docchat.models.auth import Role, UserProfile
from backend.docchat.security import (
    hash_password,
    hash_session_token,
    new_session_token,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    username: str = ""
    password: str = ""


class SignupRequest(BaseModel):
    """Request body for POST /auth/signup."""

    email: str = ""
    username: str = ""
    password: str = ""


class SessionResponse(BaseModel):
    """Response for GET /auth/session."""

    model_config = ConfigDict(populate_by_name=True)

    is_authenticated: bool = Field(..., serialization_alias="isAuthenticated")
    user: UserProfile | None = None


def _profile(user: UserRecord) -> UserProfile:
    return UserProfile(id=user.user_id, email=user.email, username=user.username, role=user.role)


async def _start_session(
    response: Response, user: UserRecord, stores: Stores, settings: Settings
) -> None:
    """Create a server-side session and set its token as an HttpOnly cookie."""
    token = new_session_token()
    ttl = timedelta(hours=settings.session_ttl_hours)
    await stores.sessions.create_session(
        hash_session_token(token), user.user_id, datetime.now(UTC) + ttl
    )
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=int(ttl.total_seconds()),
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
        path="/",
    )


@router.post("/login", response_model=UserProfile)
async def login(
    body: LoginRequest,
    response: Response,
    stores: Annotated[Stores, Depends(get_stores)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UserProfile:
    """Verify credentials and start a session.

    Raises:
        HTTPException: 401 on unknown user or wrong password
    """
    user = await stores.users.get_by_username(body.username)
    if user is None or not verify_password(body.password, user.password_hash):
        logger.info(f"Failed login for {body.username!r}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    await _start_session(response, user, stores, settings)
    return _profile(user)


@router.post("/signup", response_model=UserProfile)
async def signup(
    body: SignupRequest,
    response: Response,
    stores: Annotated[Stores, Depends(get_stores)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UserProfile:
    """Create a regular user account and start a session.

    Raises:
        HTTPException: 400 if a field is missing, 409 if the username or email is taken
    """
    email = body.email.strip()
    username = body.username.strip()
    if not email or not username or not body.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing fields")

    if await stores.users.exists(username=username, email=email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already exists")

    try:
        user = await stores.users.create_user(
            email=email,
            username=username,
            password_hash=hash_password(body.password),
            role=Role.user,
        )
    except DuplicateUserError:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already exists") from None
    logger.info(f"Created user {user.user_id}")

    await _start_session(response, user, stores, settings)
    return _profile(user)


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    stores: Annotated[Stores, Depends(get_stores)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> dict[str, bool]:
    """Delete the server-side session (if any) and clear the cookie."""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        await stores.sessions.delete_session(hash_session_token(token))
    response.delete_cookie(key=settings.session_cookie_name, path="/")
    return {"ok": True}


@router.get("/session", response_model=SessionResponse, response_model_by_alias=True)
async def session(
    request: Request,
    stores: Annotated[Stores, Depends(get_stores)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> SessionResponse:
    """Report whether the caller has a valid session (never 401)."""
    try:
        ctx: RequestContext = await get_current_user(request, stores, settings)
    except HTTPException:
        return SessionResponse(is_authenticated=False)

    return SessionResponse(
        is_authenticated=True,
        user=UserProfile(id=ctx.user_id, email=ctx.email, username=ctx.username, role=ctx.role),
    )
