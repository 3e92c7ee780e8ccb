"""Request context for the authenticated caller."""

from dataclasses import dataclass
from uuid import UUID

from backend.docchat.models.auth import Role


@dataclass(frozen=True)
class RequestContext:
    """Identity of the caller resolved from the session cookie.

    Used to scope chat operations to their owner and gate admin routes.
    """

    user_id: UUID
    email: str
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.admin
