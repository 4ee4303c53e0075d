"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from centerstage.adapters.supabase_project_repository import SupabaseProjectRepository
from centerstage.adapters.supabase_submission_repository import (
    SupabaseSubmissionRepository,
)
from centerstage.adapters.supabase_user_repository import SupabaseUserRepository
from centerstage.config import Settings
from centerstage.services.dashboard import DashboardService
from centerstage.services.projects import ProjectService
from centerstage.services.rate_limit import InMemoryRateLimitStore, RateLimiter
from centerstage.services.review import ReviewQueueService
from centerstage.services.submissions import SubmissionService
from centerstage.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    project_service: ProjectService
    submission_service: SubmissionService
    review_service: ReviewQueueService
    dashboard_service: DashboardService
    user_service: UserService
    rate_limiter: RateLimiter
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    project_repository = SupabaseProjectRepository(supabase_client)
    submission_repository = SupabaseSubmissionRepository(supabase_client)
    user_repository = SupabaseUserRepository(supabase_client)
    project_service = ProjectService(project_repository)
    submission_service = SubmissionService(submission_repository, project_repository)
    user_service = UserService(user_repository, project_repository)
    rate_limiter = RateLimiter(
        InMemoryRateLimitStore(),
        limit=resolved_settings.submission_rate_limit,
        window_ms=resolved_settings.submission_rate_window_ms,
    )

    async def close_resources() -> None:
        # The Supabase client holds no sockets that need closing.
        return None

    return AppContainer(
        settings=resolved_settings,
        project_service=project_service,
        submission_service=submission_service,
        review_service=ReviewQueueService(submission_service),
        dashboard_service=DashboardService(project_service, submission_service),
        user_service=user_service,
        rate_limiter=rate_limiter,
        close_resources=close_resources,
    )
