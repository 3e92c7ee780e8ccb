"""User, session and organization settings models."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Account role."""

    admin = "admin"
    user = "user"


class UserProfile(BaseModel):
    """Public view of a user account."""

    id: UUID
    email: str
    username: str
    role: Role


class OrgSettings(BaseModel):
    """Organization branding and usage settings."""

    organization_name: str = "Acme Corp"
    primary_color: str = "#3b82f6"
    secondary_color: str = "#10b981"
    logo_url: str = ""
    token_limit: int = Field(100_000, ge=0)


class OrgSettingsUpdate(BaseModel):
    """Partial update for OrgSettings."""

    organization_name: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    logo_url: str | None = None
    token_limit: int | None = Field(None, ge=0)
