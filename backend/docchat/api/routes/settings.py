"""Organization settings endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from backend.docchat.api.auth import get_current_user, require_admin
from backend.docchat.api.dependencies import get_stores
from backend.docchat.db.context import RequestContext
from backend.docchat.db.repositories import Stores
from backend.docchat.models.auth import OrgSettings, OrgSettingsUpdate

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=OrgSettings)
async def get_org_settings(
    ctx: Annotated[RequestContext, Depends(get_current_user)],
    stores: Annotated[Stores, Depends(get_stores)],
) -> OrgSettings:
    return await stores.settings.get_settings()


@router.put("", response_model=OrgSettings)
async def update_org_settings(
    body: OrgSettingsUpdate,
    ctx: Annotated[RequestContext, Depends(require_admin)],
    stores: Annotated[Stores, Depends(get_stores)],
) -> OrgSettings:
    """Merge the provided fields into the stored settings (admin only)."""
    return await stores.settings.update_settings(body)
