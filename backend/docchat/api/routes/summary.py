"""Admin dashboard summary endpoint - GET /summary."""

from typing import Annotated

from fastapi import APIRouter, Depends

from backend.docchat.api.auth import require_admin
from backend.docchat.api.dependencies import get_stores
from backend.docchat.db.context import RequestContext
from backend.docchat.db.repositories import Stores
from backend.docchat.models.summary import DashboardSummary
from backend.docchat.summary import build_summary

router = APIRouter(tags=["summary"])


@router.get("/summary", response_model=DashboardSummary)
async def summary(
    ctx: Annotated[RequestContext, Depends(require_admin)],
    stores: Annotated[Stores, Depends(get_stores)],
) -> DashboardSummary:
    """Document/chat counts, recent items and seven-day activity."""
    return await build_summary(stores)
