"""Session-cookie authentication dependencies.

The cookie carries an opaque random token; only its SHA-256 hash is stored.
Role checks happen server-side against the stored user record.
"""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from backend.docchat.api.dependencies import get_app_settings, get_stores
from backend.docchat.config import Settings
from backend.docchat.db.context import RequestContext
from backend.docchat.db.models import as_utc
from backend.docchat.db.repositories import Stores
from backend.docchat.security import hash_session_token


async def get_current_user(
    request: Request,
    stores: Annotated[Stores, Depends(get_stores)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> RequestContext:
    """Resolve the session cookie to the calling user.

    Args:
        request: Incoming request (session cookie is read from it)
        stores: Store bundle
        settings: Application settings (cookie name)

    Returns:
        RequestContext for the authenticated user

    Raises:
        HTTPException: 401 if the cookie is missing, unknown or expired
    """
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated"
        )

    token_hash = hash_session_token(token)
    session = await stores.sessions.get_session(token_hash)
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session")

    if as_utc(session.expires_at) <= datetime.now(UTC):
        await stores.sessions.delete_session(token_hash)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expired")

    user = await stores.users.get_by_id(session.user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session")

    return RequestContext(
        user_id=user.user_id, email=user.email, username=user.username, role=user.role
    )


async def require_admin(
    ctx: Annotated[RequestContext, Depends(get_current_user)],
) -> RequestContext:
    """Like get_current_user, but 403 for non-admin accounts."""
    if not ctx.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return ctx
