"""Project management and presentation settings."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from centerstage.domain.projects import PresentationConfig, Project
from centerstage.domain.slugs import slugify
from centerstage.domain.validation import (
    PresentationConfigInput,
    ProjectInput,
    ProjectUpdate,
    validate_input,
)
from centerstage.errors import ConfirmationMismatchError, NotFoundError, ValidationError

_logger = logging.getLogger(__name__)


class ProjectRepository(Protocol):
    """Persistence interface for projects and their presentation config."""

    def create_project(self, values: dict[str, object]) -> Project:
        """Insert a project row and return it."""

    def get_project(self, project_id: UUID) -> Project | None:
        """Return a project by id, if present."""

    def get_project_by_slug(self, slug: str) -> Project | None:
        """Return a project by slug, if present."""

    def list_projects(self, project_ids: list[UUID] | None = None) -> list[Project]:
        """Return projects newest first, optionally limited to ids."""

    def list_slugs(self) -> list[str]:
        """Return every slug in use."""

    def update_project(
        self, project_id: UUID, values: dict[str, object]
    ) -> Project | None:
        """Apply column updates and return the row, or None when missing."""

    def delete_project(self, project_id: UUID) -> None:
        """Remove a project; submissions and config cascade."""

    def create_config(
        self, project_id: UUID, values: dict[str, object]
    ) -> PresentationConfig:
        """Insert the presentation config for a project."""

    def get_config(self, project_id: UUID) -> PresentationConfig | None:
        """Return the presentation config for a project, if present."""

    def update_config(
        self, project_id: UUID, values: dict[str, object]
    ) -> PresentationConfig | None:
        """Apply config updates and return the row, or None when missing."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ProjectService:
    """Application service for project lifecycle actions."""

    repository: ProjectRepository
    clock: Callable[[], datetime] = field(default=_utcnow)

    def create(
        self,
        payload: object,
        config_payload: object | None = None,
        created_by: UUID | None = None,
    ) -> tuple[Project, PresentationConfig]:
        """Create a project and its presentation config.

        Without an explicit slug one is derived from the project name. If the
        config cannot be stored the project row is removed again.
        """
        data = validate_input(ProjectInput, payload)
        config = validate_input(PresentationConfigInput, config_payload or {})
        existing = self.repository.list_slugs()
        if data.slug is None:
            slug = slugify(data.name, existing)
        elif data.slug in existing:
            raise ValidationError(
                "Slug already in use",
                [{"field": "slug", "message": "A project with this slug exists"}],
            )
        else:
            slug = data.slug
        project = self.repository.create_project(
            {
                "name": data.name,
                "client_name": data.client_name,
                "slug": slug,
                "status": "active",
                "created_by": str(created_by) if created_by else None,
            }
        )
        try:
            stored_config = self.repository.create_config(
                project.id, config.to_record()
            )
        except Exception:
            _logger.exception(
                "Failed to create presentation config, removing project %s",
                project.id,
            )
            self.repository.delete_project(project.id)
            raise
        _logger.info("Project created: id=%s slug=%s", project.id, project.slug)
        return project, stored_config

    def get(self, project_id: UUID) -> Project:
        """Return a project or raise ``NotFoundError``."""
        project = self.repository.get_project(project_id)
        if project is None:
            raise NotFoundError("project", project_id)
        return project

    def get_by_slug(self, slug: str) -> Project:
        """Return a project by slug or raise ``NotFoundError``."""
        project = self.repository.get_project_by_slug(slug)
        if project is None:
            raise NotFoundError("project", slug)
        return project

    def get_public(self, slug: str) -> tuple[Project, PresentationConfig]:
        """Return an active project and its config for the public pages."""
        project = self.get_by_slug(slug)
        if not project.is_active:
            raise NotFoundError("project", slug)
        return project, self.get_config(project.id)

    def list_projects(self, project_ids: list[UUID] | None = None) -> list[Project]:
        """Return projects, optionally restricted to the given ids."""
        return self.repository.list_projects(project_ids)

    def update(self, project_id: UUID, payload: object) -> Project:
        """Apply validated edits to a project."""
        changes = validate_input(ProjectUpdate, payload).changes()
        current = self.get(project_id)
        new_slug = changes.get("slug")
        if new_slug is not None and new_slug != current.slug:
            if new_slug in self.repository.list_slugs():
                raise ValidationError(
                    "Slug already in use",
                    [{"field": "slug", "message": "A project with this slug exists"}],
                )
        if changes.get("status") == "archived":
            changes["archived_at"] = self.clock().isoformat()
        if not changes:
            return current
        return self._apply(project_id, changes)

    def archive(self, project_id: UUID) -> Project:
        """Archive a project, hiding its public pages."""
        self.get(project_id)
        return self._apply(
            project_id,
            {"status": "archived", "archived_at": self.clock().isoformat()},
        )

    def soft_delete(self, project_id: UUID) -> Project:
        """Mark a project deleted without removing any data."""
        self.get(project_id)
        return self._apply(project_id, {"status": "deleted"})

    def permanent_delete(self, project_id: UUID, confirmation: str | None) -> None:
        """Remove a project and everything attached to it.

        The caller must echo the exact project name.
        """
        project = self.get(project_id)
        if confirmation != project.name:
            raise ConfirmationMismatchError(project.name)
        self.repository.delete_project(project_id)
        _logger.info("Project permanently deleted: id=%s", project_id)

    def get_config(self, project_id: UUID) -> PresentationConfig:
        """Return a project's presentation config, falling back to defaults."""
        config = self.repository.get_config(project_id)
        if config is None:
            return PresentationConfig(project_id=project_id)
        return config

    def update_config(self, project_id: UUID, payload: object) -> PresentationConfig:
        """Apply validated presentation settings."""
        changes = validate_input(PresentationConfigInput, payload).changes()
        self.get(project_id)
        if not changes:
            return self.get_config(project_id)
        updated = self.repository.update_config(project_id, changes)
        if updated is None:
            defaults = PresentationConfigInput().to_record()
            return self.repository.create_config(project_id, {**defaults, **changes})
        return updated

    def _apply(self, project_id: UUID, changes: dict[str, object]) -> Project:
        updated = self.repository.update_project(project_id, changes)
        if updated is None:
            raise NotFoundError("project", project_id)
        return updated
