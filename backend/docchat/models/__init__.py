"""Models package - re-exports for convenience."""

from backend.docchat.models.auth import OrgSettings, OrgSettingsUpdate, Role, UserProfile
from backend.docchat.models.chats import Chat, Message, Sender
from backend.docchat.models.completion import Citation, CompletionRequest, CompletionResult
from backend.docchat.models.docs import (
    Document,
    DocumentDetail,
    DocumentSummary,
    ScoredSource,
    Section,
    Source,
    StandardizedDocument,
    UploadResult,
)
from backend.docchat.models.summary import DashboardSummary, RecentItem, Trends

__all__ = [
    "Chat",
    "Citation",
    "CompletionRequest",
    "CompletionResult",
    "DashboardSummary",
    "Document",
    "DocumentDetail",
    "DocumentSummary",
    "Message",
    "OrgSettings",
    "OrgSettingsUpdate",
    "RecentItem",
    "Role",
    "ScoredSource",
    "Section",
    "Sender",
    "Source",
    "StandardizedDocument",
    "Trends",
    "UploadResult",
    "UserProfile",
]
