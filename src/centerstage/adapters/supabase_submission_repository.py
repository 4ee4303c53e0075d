"""Supabase repository for submissions."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from centerstage.adapters.rows import parse_submission
from centerstage.domain.submissions import Submission, SubmissionStatus
from centerstage.services.submissions import SubmissionRepository

_COLUMNS = (
    "id, project_id, full_name, social_handle, email, comment, photo_url, "
    "video_url, status, display_mode, custom_timing, created_at, reviewed_at, "
    "reviewed_by"
)


@dataclass
class SupabaseSubmissionRepository(SubmissionRepository):
    """Supabase implementation for submission persistence."""

    client: Client

    def create_submission(
        self, project_id: UUID, values: dict[str, object]
    ) -> Submission:
        """Insert a submission row and return it."""
        response = (
            self.client.table("submissions")
            .insert({**values, "project_id": str(project_id)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create submission")
        return parse_submission(response.data[0])

    def get_submission(self, submission_id: UUID) -> Submission | None:
        """Return a submission by id, if present."""
        response = (
            self.client.table("submissions")
            .select(_COLUMNS)
            .eq("id", str(submission_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_submission(response.data[0])

    def list_by_status(
        self, project_id: UUID, status: SubmissionStatus
    ) -> list[Submission]:
        """Return a project's submissions in one status, newest first."""
        response = (
            self.client.table("submissions")
            .select(_COLUMNS)
            .eq("project_id", str(project_id))
            .eq("status", status)
            .order("created_at", desc=True)
            .execute()
        )
        return [parse_submission(row) for row in response.data or []]

    def list_statuses(self, project_id: UUID) -> list[str]:
        """Return the status of every submission in a project."""
        response = (
            self.client.table("submissions")
            .select("status")
            .eq("project_id", str(project_id))
            .execute()
        )
        return [str(row["status"]) for row in response.data or []]

    def list_by_projects(
        self,
        project_ids: list[UUID],
        status: SubmissionStatus,
        limit: int | None = None,
    ) -> list[Submission]:
        """Return submissions in one status across projects, newest first."""
        query = (
            self.client.table("submissions")
            .select(_COLUMNS)
            .in_("project_id", [str(project_id) for project_id in project_ids])
            .eq("status", status)
            .order("created_at", desc=True)
        )
        if limit is not None:
            query = query.limit(limit)
        response = query.execute()
        return [parse_submission(row) for row in response.data or []]

    def update_submission(
        self, submission_id: UUID, values: dict[str, object]
    ) -> Submission | None:
        """Apply column updates and return the row, or None when missing."""
        response = (
            self.client.table("submissions")
            .update(values)
            .eq("id", str(submission_id))
            .execute()
        )
        if not response.data:
            return None
        return parse_submission(response.data[0])

    def delete_submission(self, submission_id: UUID) -> None:
        """Permanently remove a submission row."""
        self.client.table("submissions").delete().eq(
            "id", str(submission_id)
        ).execute()
