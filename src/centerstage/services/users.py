"""Administrator accounts and per-project access."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from centerstage.domain.users import ProjectAssignment, UserRecord, UserRole
from centerstage.errors import ForbiddenError, NotFoundError, ValidationError
from centerstage.security import generate_password, hash_password, verify_password
from centerstage.services.projects import ProjectRepository

_logger = logging.getLogger(__name__)

USER_ROLES: tuple[UserRole, ...] = ("admin", "super_admin")


class UserRepository(Protocol):
    """Persistence interface for users and project assignments."""

    def list_users(self) -> list[UserRecord]:
        """Return all users, newest first."""

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return a user by id, if present."""

    def get_user_by_email(self, email: str) -> UserRecord | None:
        """Return a user by email, if present."""

    def create_user(self, values: dict[str, object]) -> UserRecord:
        """Insert a user row and return it."""

    def update_user(
        self, user_id: UUID, values: dict[str, object]
    ) -> UserRecord | None:
        """Apply column updates and return the row, or None when missing."""

    def delete_user(self, user_id: UUID) -> None:
        """Remove a user row."""

    def list_assignments(self, user_id: UUID) -> list[ProjectAssignment]:
        """Return a user's project assignments."""

    def get_assignment(
        self, user_id: UUID, project_id: UUID
    ) -> ProjectAssignment | None:
        """Return the assignment of a user to a project, if present."""

    def create_assignment(
        self, user_id: UUID, project_id: UUID, assigned_by: UUID | None
    ) -> ProjectAssignment:
        """Insert a project assignment and return it."""

    def delete_assignment(self, user_id: UUID, project_id: UUID) -> None:
        """Remove a project assignment."""


@dataclass
class UserService:
    """Application service for accounts and access control."""

    repository: UserRepository
    project_repository: ProjectRepository

    def list_users(self) -> list[UserRecord]:
        """Return every account."""
        return self.repository.list_users()

    def get(self, user_id: UUID) -> UserRecord:
        """Return a user or raise ``NotFoundError``."""
        user = self.repository.get_user(user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        return user

    def authenticate(self, email: str, password: str) -> UserRecord | None:
        """Return the user for valid credentials, else None."""
        user = self.repository.get_user_by_email(email.strip().lower())
        if user is None or not verify_password(password, user.password_hash):
            return None
        return user

    def create_user(
        self, email: str, name: str, role: UserRole = "admin"
    ) -> tuple[UserRecord, str]:
        """Create an account with a generated password.

        The plaintext password is returned once and never stored.
        """
        normalized = _normalize_email(email)
        _require_role(role)
        if not name.strip():
            raise ValidationError(
                "Invalid user data", [{"field": "name", "message": "Name is required"}]
            )
        if self.repository.get_user_by_email(normalized) is not None:
            raise ValidationError(
                "A user with this email already exists",
                [{"field": "email", "message": "Email already registered"}],
            )
        password = generate_password()
        user = self.repository.create_user(
            {
                "email": normalized,
                "name": name.strip(),
                "role": role,
                "password_hash": hash_password(password),
            }
        )
        _logger.info("User created: id=%s role=%s", user.id, role)
        return user, password

    def update_user(
        self,
        user_id: UUID,
        email: str | None = None,
        name: str | None = None,
        role: UserRole | None = None,
    ) -> UserRecord:
        """Edit account details."""
        changes: dict[str, object] = {}
        if email is not None:
            normalized = _normalize_email(email)
            existing = self.repository.get_user_by_email(normalized)
            if existing is not None and existing.id != user_id:
                raise ValidationError(
                    "A user with this email already exists",
                    [{"field": "email", "message": "Email already registered"}],
                )
            changes["email"] = normalized
        if name is not None:
            changes["name"] = name.strip()
        if role is not None:
            _require_role(role)
            changes["role"] = role
        if not changes:
            return self.get(user_id)
        updated = self.repository.update_user(user_id, changes)
        if updated is None:
            raise NotFoundError("user", user_id)
        return updated

    def reset_password(self, user_id: UUID) -> str:
        """Replace a password with a generated one and return it."""
        password = generate_password()
        self.set_password(user_id, password)
        return password

    def set_password(self, user_id: UUID, password: str) -> None:
        """Replace a password with a chosen one."""
        if len(password) < 8:  # noqa: PLR2004
            raise ValidationError(
                "Invalid password",
                [{"field": "password", "message": "Must be at least 8 characters"}],
            )
        updated = self.repository.update_user(
            user_id, {"password_hash": hash_password(password)}
        )
        if updated is None:
            raise NotFoundError("user", user_id)

    def delete_user(self, user_id: UUID, acting_user_id: UUID) -> None:
        """Remove an account other than the acting one."""
        if user_id == acting_user_id:
            raise ForbiddenError("Cannot delete your own account")
        self.get(user_id)
        self.repository.delete_user(user_id)
        _logger.info("User deleted: id=%s", user_id)

    def assign(
        self, user_id: UUID, project_id: UUID, assigned_by: UUID | None
    ) -> ProjectAssignment:
        """Grant a user access to a project."""
        self.get(user_id)
        if self.project_repository.get_project(project_id) is None:
            raise NotFoundError("project", project_id)
        if self.repository.get_assignment(user_id, project_id) is not None:
            raise ValidationError(
                "User is already assigned to this project",
                [{"field": "project_id", "message": "Already assigned"}],
            )
        return self.repository.create_assignment(user_id, project_id, assigned_by)

    def unassign(self, user_id: UUID, project_id: UUID) -> None:
        """Revoke a user's access to a project."""
        self.repository.delete_assignment(user_id, project_id)

    def list_assignments(self, user_id: UUID) -> list[ProjectAssignment]:
        """Return the projects assigned to a user."""
        return self.repository.list_assignments(user_id)

    def set_assignments(
        self, user_id: UUID, project_ids: list[UUID], assigned_by: UUID | None
    ) -> list[ProjectAssignment]:
        """Replace a user's assignments with exactly ``project_ids``."""
        self.get(user_id)
        wanted = set(project_ids)
        for project_id in wanted:
            if self.project_repository.get_project(project_id) is None:
                raise NotFoundError("project", project_id)
        current = {a.project_id for a in self.repository.list_assignments(user_id)}
        for project_id in current - wanted:
            self.repository.delete_assignment(user_id, project_id)
        for project_id in project_ids:
            if project_id not in current:
                self.repository.create_assignment(user_id, project_id, assigned_by)
                current.add(project_id)
        _logger.info("Assignments replaced: user_id=%s count=%s", user_id, len(wanted))
        return self.repository.list_assignments(user_id)

    def accessible_project_ids(self, user_id: UUID) -> list[UUID]:
        """Return every project id a user may manage.

        Super admins see all projects; admins see their assignments.
        """
        user = self.get(user_id)
        if user.is_super_admin:
            return [project.id for project in self.project_repository.list_projects()]
        return [
            assignment.project_id
            for assignment in self.repository.list_assignments(user_id)
        ]

    def has_project_access(self, user_id: UUID, project_id: UUID) -> bool:
        """Return True when a user may manage a project."""
        user = self.get(user_id)
        if user.is_super_admin:
            return True
        return self.repository.get_assignment(user_id, project_id) is not None

    def require_project_access(self, user_id: UUID, project_id: UUID) -> None:
        """Raise ``ForbiddenError`` unless a user may manage a project."""
        if not self.has_project_access(user_id, project_id):
            raise ForbiddenError("No access to this project")

    def require_super_admin(self, user_id: UUID) -> UserRecord:
        """Return the user, raising ``ForbiddenError`` unless super admin."""
        user = self.get(user_id)
        if not user.is_super_admin:
            raise ForbiddenError("Super admin access required")
        return user


def _normalize_email(email: str) -> str:
    normalized = email.strip().lower()
    if "@" not in normalized or normalized.startswith("@"):
        raise ValidationError(
            "Invalid user data", [{"field": "email", "message": "Invalid email"}]
        )
    return normalized


def _require_role(role: str) -> None:
    if role not in USER_ROLES:
        raise ValidationError(
            "Invalid user data", [{"field": "role", "message": f"unknown role {role!r}"}]
        )
