"""Supabase repository for projects and presentation settings."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from centerstage.adapters.rows import parse_config, parse_project
from centerstage.domain.projects import PresentationConfig, Project
from centerstage.services.projects import ProjectRepository

_PROJECT_COLUMNS = (
    "id, name, client_name, slug, status, created_by, created_at, archived_at"
)
_CONFIG_COLUMNS = (
    "project_id, font_family, font_size, text_color, outline_color, "
    "background_color, background_image_url, transition_duration, "
    "animation_style, layout_template, randomize_order, allow_video_finish"
)


@dataclass
class SupabaseProjectRepository(ProjectRepository):
    """Supabase implementation for projects and their configs."""

    client: Client

    def create_project(self, values: dict[str, object]) -> Project:
        """Insert a project row and return it."""
        response = self.client.table("projects").insert(values).execute()
        if not response.data:
            raise RuntimeError("Failed to create project")
        return parse_project(response.data[0])

    def get_project(self, project_id: UUID) -> Project | None:
        """Return a project by id, if present."""
        response = (
            self.client.table("projects")
            .select(_PROJECT_COLUMNS)
            .eq("id", str(project_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_project(response.data[0])

    def get_project_by_slug(self, slug: str) -> Project | None:
        """Return a project by slug, if present."""
        response = (
            self.client.table("projects")
            .select(_PROJECT_COLUMNS)
            .eq("slug", slug)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_project(response.data[0])

    def list_projects(self, project_ids: list[UUID] | None = None) -> list[Project]:
        """Return projects newest first, optionally limited to ids."""
        if project_ids is not None and not project_ids:
            return []
        query = self.client.table("projects").select(_PROJECT_COLUMNS)
        if project_ids is not None:
            query = query.in_("id", [str(project_id) for project_id in project_ids])
        response = query.order("created_at", desc=True).execute()
        return [parse_project(row) for row in response.data or []]

    def list_slugs(self) -> list[str]:
        """Return every slug in use."""
        response = self.client.table("projects").select("slug").execute()
        return [str(row["slug"]) for row in response.data or []]

    def update_project(
        self, project_id: UUID, values: dict[str, object]
    ) -> Project | None:
        """Apply column updates and return the row, or None when missing."""
        response = (
            self.client.table("projects")
            .update(values)
            .eq("id", str(project_id))
            .execute()
        )
        if not response.data:
            return None
        return parse_project(response.data[0])

    def delete_project(self, project_id: UUID) -> None:
        """Remove a project; submissions and config cascade in the database."""
        self.client.table("projects").delete().eq("id", str(project_id)).execute()

    def create_config(
        self, project_id: UUID, values: dict[str, object]
    ) -> PresentationConfig:
        """Insert the presentation config for a project."""
        response = (
            self.client.table("presentation_config")
            .insert({**values, "project_id": str(project_id)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create presentation config")
        return parse_config(response.data[0])

    def get_config(self, project_id: UUID) -> PresentationConfig | None:
        """Return the presentation config for a project, if present."""
        response = (
            self.client.table("presentation_config")
            .select(_CONFIG_COLUMNS)
            .eq("project_id", str(project_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_config(response.data[0])

    def update_config(
        self, project_id: UUID, values: dict[str, object]
    ) -> PresentationConfig | None:
        """Apply config updates and return the row, or None when missing."""
        response = (
            self.client.table("presentation_config")
            .update(values)
            .eq("project_id", str(project_id))
            .execute()
        )
        if not response.data:
            return None
        return parse_config(response.data[0])
