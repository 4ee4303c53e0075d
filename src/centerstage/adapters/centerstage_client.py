"""HTTP client for the CenterStage API."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

import httpx

from centerstage.adapters.rows import parse_config, parse_project, parse_submission
from centerstage.domain.projects import PresentationConfig, Project
from centerstage.domain.submissions import Submission, SubmissionStatus
from centerstage.errors import TransientFetchError


class CenterStageClient(Protocol):
    """Interface for the endpoints a presentation display consumes."""

    async def fetch_public_project(
        self, slug: str
    ) -> tuple[Project, PresentationConfig]:
        """Fetch an active project and its presentation config by slug."""

    async def fetch_approved(self, project_id: UUID) -> list[Submission]:
        """Fetch the approved submissions for a project."""


class ReviewClient(Protocol):
    """Interface for the admin endpoints a review queue consumes."""

    async def fetch_counts(self, project_id: UUID) -> dict[str, int]:
        """Fetch per-status submission counts for a project."""

    async def fetch_list(
        self, project_id: UUID, status: SubmissionStatus
    ) -> list[Submission]:
        """Fetch one review tab for a project."""


@dataclass
class HttpxCenterStageClient(CenterStageClient, ReviewClient):
    """HTTPX-backed client for a running CenterStage API.

    Admin endpoints need ``access_token``; the public ones work without it.
    """

    base_url: str
    http_client: httpx.AsyncClient
    access_token: str | None = None

    @classmethod
    def create(
        cls, base_url: str, access_token: str | None = None
    ) -> "HttpxCenterStageClient":
        """Create a client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            access_token=access_token,
        )

    async def fetch_public_project(
        self, slug: str
    ) -> tuple[Project, PresentationConfig]:
        """Fetch an active project and its presentation config by slug."""
        data = await self._get_json(f"/public/projects/{slug}")
        return parse_project(data["project"]), parse_config(data["config"])

    async def fetch_approved(self, project_id: UUID) -> list[Submission]:
        """Fetch the approved submissions for a project."""
        data = await self._get_json(f"/api/presentations/{project_id}/submissions")
        return [parse_submission(row) for row in data.get("submissions") or []]

    async def fetch_counts(self, project_id: UUID) -> dict[str, int]:
        """Fetch per-status submission counts for a project."""
        data = await self._get_json(
            "/api/submissions/counts", params={"project_id": str(project_id)}
        )
        counts = data.get("counts") or {}
        return {str(key): int(value) for key, value in counts.items()}

    async def fetch_list(
        self, project_id: UUID, status: SubmissionStatus
    ) -> list[Submission]:
        """Fetch one review tab for a project."""
        data = await self._get_json(
            f"/api/projects/{project_id}/submissions", params={"status": status}
        )
        return [parse_submission(row) for row in data.get("submissions") or []]

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _get_json(
        self, path: str, params: dict[str, str] | None = None
    ) -> dict[str, object]:
        headers = (
            {"Authorization": f"Bearer {self.access_token}"}
            if self.access_token
            else {}
        )
        try:
            response = await self.http_client.get(
                f"{self.base_url}{path}", params=params, headers=headers, timeout=10
            )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise TransientFetchError(f"Failed to fetch {path}: {exc}") from exc
