"""Admin dashboard summary models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class RecentItem(BaseModel):
    """Recent document or chat shown on the dashboard."""

    id: UUID
    name: str
    date: datetime


class Trends(BaseModel):
    """Per-day counts for the last seven days, oldest first."""

    days: list[str]
    uploads_per_day: list[int]
    queries_per_day: list[int]


class DashboardSummary(BaseModel):
    """Response for GET /summary."""

    documents: int
    active_chats: int
    recent_docs: list[RecentItem]
    recent_chats: list[RecentItem]
    trends: Trends
