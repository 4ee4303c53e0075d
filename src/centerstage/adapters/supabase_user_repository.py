"""Supabase-backed user repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from centerstage.domain.users import ProjectAssignment, UserRecord
from centerstage.services.users import UserRepository

_USER_COLUMNS = "id, email, name, role, password_hash, created_at"
_ASSIGNMENT_COLUMNS = "id, user_id, project_id, assigned_by, assigned_at"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for users and project assignments."""

    client: Client

    def list_users(self) -> list[UserRecord]:
        """Return all users, newest first."""
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .order("created_at", desc=True)
            .execute()
        )
        return [_parse_user(row) for row in response.data or []]

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return a user by id, if present."""
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .eq("id", str(user_id))
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_user(response.data[0])
        return None

    def get_user_by_email(self, email: str) -> UserRecord | None:
        """Return a user by email, if present."""
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .eq("email", email)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_user(response.data[0])
        return None

    def create_user(self, values: dict[str, object]) -> UserRecord:
        """Create a new user row and return it."""
        response = self.client.table("users").insert(values).execute()
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _parse_user(response.data[0])

    def update_user(
        self, user_id: UUID, values: dict[str, object]
    ) -> UserRecord | None:
        """Apply column updates and return the row, or None when missing."""
        response = (
            self.client.table("users").update(values).eq("id", str(user_id)).execute()
        )
        if not response.data:
            return None
        return _parse_user(response.data[0])

    def delete_user(self, user_id: UUID) -> None:
        """Remove a user row."""
        self.client.table("users").delete().eq("id", str(user_id)).execute()

    def list_assignments(self, user_id: UUID) -> list[ProjectAssignment]:
        """Return a user's project assignments."""
        response = (
            self.client.table("project_users")
            .select(_ASSIGNMENT_COLUMNS)
            .eq("user_id", str(user_id))
            .order("assigned_at", desc=True)
            .execute()
        )
        return [_parse_assignment(row) for row in response.data or []]

    def get_assignment(
        self, user_id: UUID, project_id: UUID
    ) -> ProjectAssignment | None:
        """Return the assignment of a user to a project, if present."""
        response = (
            self.client.table("project_users")
            .select(_ASSIGNMENT_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("project_id", str(project_id))
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_assignment(response.data[0])
        return None

    def create_assignment(
        self, user_id: UUID, project_id: UUID, assigned_by: UUID | None
    ) -> ProjectAssignment:
        """Insert a project assignment and return it."""
        response = (
            self.client.table("project_users")
            .insert(
                {
                    "user_id": str(user_id),
                    "project_id": str(project_id),
                    "assigned_by": str(assigned_by) if assigned_by else None,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to assign user to project")
        return _parse_assignment(response.data[0])

    def delete_assignment(self, user_id: UUID, project_id: UUID) -> None:
        """Remove a project assignment."""
        self.client.table("project_users").delete().eq("user_id", str(user_id)).eq(
            "project_id", str(project_id)
        ).execute()


def _parse_user(row: dict[str, object]) -> UserRecord:
    return UserRecord(
        id=UUID(str(row["id"])),
        email=str(row["email"]),
        name=str(row.get("name") or ""),
        role=row.get("role") or "admin",
        password_hash=str(row.get("password_hash") or ""),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )


def _parse_assignment(row: dict[str, object]) -> ProjectAssignment:
    return ProjectAssignment(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        project_id=UUID(str(row["project_id"])),
        assigned_by=UUID(str(row["assigned_by"])) if row.get("assigned_by") else None,
        assigned_at=datetime.fromisoformat(str(row["assigned_at"])),
    )
