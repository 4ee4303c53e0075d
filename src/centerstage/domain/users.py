"""Domain models for administrators and project access."""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal
from uuid import UUID

UserRole = Literal["admin", "super_admin"]


@dataclass(frozen=True)
class UserRecord:
    """Represents an administrator account."""

    id: UUID
    email: str
    name: str
    role: UserRole
    password_hash: str
    created_at: datetime

    @property
    def is_super_admin(self) -> bool:
        """Return True for accounts with full access."""
        return self.role == "super_admin"


@dataclass(frozen=True)
class ProjectAssignment:
    """Grants an admin access to a single project."""

    id: UUID
    user_id: UUID
    project_id: UUID
    assigned_by: UUID | None
    assigned_at: datetime
