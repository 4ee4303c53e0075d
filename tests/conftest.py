"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from centerstage.config import Settings
from centerstage.containers import AppContainer
from centerstage.domain.projects import PresentationConfig, Project
from centerstage.domain.submissions import Submission, SubmissionStatus
from centerstage.domain.users import ProjectAssignment, UserRecord
from centerstage.security import hash_password, make_access_token
from centerstage.services.dashboard import DashboardService
from centerstage.services.projects import ProjectRepository, ProjectService
from centerstage.services.rate_limit import InMemoryRateLimitStore, RateLimiter
from centerstage.services.review import ReviewQueueService
from centerstage.services.submissions import SubmissionRepository, SubmissionService
from centerstage.services.users import UserRepository, UserService

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
TEST_PASSWORD = "correct-horse"


def _to_datetime(value: object) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _to_uuid(value: object) -> UUID | None:
    if value is None or isinstance(value, UUID):
        return value
    return UUID(str(value))


def make_submission(**overrides: object) -> Submission:
    """Build an approved submission with sensible defaults."""
    values: dict[str, object] = {
        "id": uuid4(),
        "project_id": uuid4(),
        "full_name": "Ada Lovelace",
        "comment": "What a wonderful evening!",
        "status": "approved",
        "created_at": BASE_TIME,
    }
    values.update(overrides)
    return Submission(**values)


@dataclass
class FakeClock:
    """Millisecond clock advanced by hand."""

    now: int = 1_000_000

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@dataclass
class FakeTimer:
    when: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeScheduler:
    """Deterministic stand-in for ``loop.call_later`` and ``loop.time``."""

    now: float = 0.0
    timers: list[FakeTimer] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def clock(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self.timers if not t.cancelled and t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self.timers.remove(timer)
            self.now = timer.when
            timer.callback()
        self.now = target

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]


@dataclass
class InMemoryProjectRepository(ProjectRepository):
    """In-memory project repository for tests."""

    projects: dict[UUID, Project] = field(default_factory=dict)
    configs: dict[UUID, PresentationConfig] = field(default_factory=dict)
    fail_config_create: bool = False
    deleted: list[UUID] = field(default_factory=list)

    def create_project(self, values: dict[str, object]) -> Project:
        project = Project(
            id=uuid4(),
            name=str(values["name"]),
            client_name=str(values["client_name"]),
            slug=str(values["slug"]),
            status=values.get("status") or "active",
            created_by=_to_uuid(values.get("created_by")),
            created_at=BASE_TIME + timedelta(seconds=len(self.projects)),
        )
        self.projects[project.id] = project
        return project

    def get_project(self, project_id: UUID) -> Project | None:
        return self.projects.get(project_id)

    def get_project_by_slug(self, slug: str) -> Project | None:
        for project in self.projects.values():
            if project.slug == slug:
                return project
        return None

    def list_projects(self, project_ids: list[UUID] | None = None) -> list[Project]:
        projects = [
            project
            for project in self.projects.values()
            if project_ids is None or project.id in project_ids
        ]
        return sorted(projects, key=lambda project: project.created_at, reverse=True)

    def list_slugs(self) -> list[str]:
        return [project.slug for project in self.projects.values()]

    def update_project(
        self, project_id: UUID, values: dict[str, object]
    ) -> Project | None:
        project = self.projects.get(project_id)
        if project is None:
            return None
        changes = dict(values)
        if "archived_at" in changes:
            changes["archived_at"] = _to_datetime(changes["archived_at"])
        updated = replace(project, **changes)
        self.projects[project_id] = updated
        return updated

    def delete_project(self, project_id: UUID) -> None:
        self.deleted.append(project_id)
        self.projects.pop(project_id, None)
        self.configs.pop(project_id, None)

    def create_config(
        self, project_id: UUID, values: dict[str, object]
    ) -> PresentationConfig:
        if self.fail_config_create:
            raise RuntimeError("Failed to create presentation config")
        config = PresentationConfig(project_id=project_id, **values)
        self.configs[project_id] = config
        return config

    def get_config(self, project_id: UUID) -> PresentationConfig | None:
        return self.configs.get(project_id)

    def update_config(
        self, project_id: UUID, values: dict[str, object]
    ) -> PresentationConfig | None:
        config = self.configs.get(project_id)
        if config is None:
            return None
        updated = replace(config, **values)
        self.configs[project_id] = updated
        return updated


@dataclass
class InMemorySubmissionRepository(SubmissionRepository):
    """In-memory submission repository for tests."""

    submissions: dict[UUID, Submission] = field(default_factory=dict)

    def create_submission(
        self, project_id: UUID, values: dict[str, object]
    ) -> Submission:
        submission = Submission(
            id=uuid4(),
            project_id=project_id,
            created_at=BASE_TIME + timedelta(seconds=len(self.submissions)),
            **values,
        )
        self.submissions[submission.id] = submission
        return submission

    def get_submission(self, submission_id: UUID) -> Submission | None:
        return self.submissions.get(submission_id)

    def list_by_status(
        self, project_id: UUID, status: SubmissionStatus
    ) -> list[Submission]:
        matches = [
            submission
            for submission in self.submissions.values()
            if submission.project_id == project_id and submission.status == status
        ]
        return sorted(matches, key=lambda item: item.created_at, reverse=True)

    def list_statuses(self, project_id: UUID) -> list[str]:
        return [
            submission.status
            for submission in self.submissions.values()
            if submission.project_id == project_id
        ]

    def list_by_projects(
        self,
        project_ids: list[UUID],
        status: SubmissionStatus,
        limit: int | None = None,
    ) -> list[Submission]:
        matches = sorted(
            (
                submission
                for submission in self.submissions.values()
                if submission.project_id in project_ids and submission.status == status
            ),
            key=lambda item: item.created_at,
            reverse=True,
        )
        return matches if limit is None else matches[:limit]

    def update_submission(
        self, submission_id: UUID, values: dict[str, object]
    ) -> Submission | None:
        submission = self.submissions.get(submission_id)
        if submission is None:
            return None
        changes = dict(values)
        if "reviewed_at" in changes:
            changes["reviewed_at"] = _to_datetime(changes["reviewed_at"])
        if "reviewed_by" in changes:
            changes["reviewed_by"] = _to_uuid(changes["reviewed_by"])
        updated = replace(submission, **changes)
        self.submissions[submission_id] = updated
        return updated

    def delete_submission(self, submission_id: UUID) -> None:
        self.submissions.pop(submission_id, None)

    def add(self, submission: Submission) -> Submission:
        self.submissions[submission.id] = submission
        return submission


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[UUID, UserRecord] = field(default_factory=dict)
    assignments: list[ProjectAssignment] = field(default_factory=list)

    def list_users(self) -> list[UserRecord]:
        return sorted(self.users.values(), key=lambda u: u.created_at, reverse=True)

    def get_user(self, user_id: UUID) -> UserRecord | None:
        return self.users.get(user_id)

    def get_user_by_email(self, email: str) -> UserRecord | None:
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    def create_user(self, values: dict[str, object]) -> UserRecord:
        user = UserRecord(
            id=uuid4(),
            created_at=BASE_TIME + timedelta(seconds=len(self.users)),
            **values,
        )
        self.users[user.id] = user
        return user

    def update_user(
        self, user_id: UUID, values: dict[str, object]
    ) -> UserRecord | None:
        user = self.users.get(user_id)
        if user is None:
            return None
        updated = replace(user, **values)
        self.users[user_id] = updated
        return updated

    def delete_user(self, user_id: UUID) -> None:
        self.users.pop(user_id, None)
        self.assignments = [a for a in self.assignments if a.user_id != user_id]

    def list_assignments(self, user_id: UUID) -> list[ProjectAssignment]:
        return [a for a in self.assignments if a.user_id == user_id]

    def get_assignment(
        self, user_id: UUID, project_id: UUID
    ) -> ProjectAssignment | None:
        for assignment in self.assignments:
            if assignment.user_id == user_id and assignment.project_id == project_id:
                return assignment
        return None

    def create_assignment(
        self, user_id: UUID, project_id: UUID, assigned_by: UUID | None
    ) -> ProjectAssignment:
        assignment = ProjectAssignment(
            id=uuid4(),
            user_id=user_id,
            project_id=project_id,
            assigned_by=assigned_by,
            assigned_at=BASE_TIME,
        )
        self.assignments.append(assignment)
        return assignment

    def delete_assignment(self, user_id: UUID, project_id: UUID) -> None:
        self.assignments = [
            a
            for a in self.assignments
            if not (a.user_id == user_id and a.project_id == project_id)
        ]

    def add_user(
        self, email: str, role: str = "admin", password: str = TEST_PASSWORD
    ) -> UserRecord:
        return self.create_user(
            {
                "email": email,
                "name": email.split("@")[0],
                "role": role,
                "password_hash": hash_password(password),
            }
        )


def auth_headers(container: AppContainer, user: UserRecord) -> dict[str, str]:
    """Return an Authorization header for a user."""
    token = make_access_token(
        str(user.id),
        container.settings.jwt_secret,
        container.settings.jwt_ttl_minutes,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        jwt_secret="test-secret-with-enough-length-for-hs256",
        public_base_url="https://stage.example.com",
    )


@pytest.fixture
def project_repository() -> InMemoryProjectRepository:
    return InMemoryProjectRepository()


@pytest.fixture
def submission_repository() -> InMemorySubmissionRepository:
    return InMemorySubmissionRepository()


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def project_service(project_repository: InMemoryProjectRepository) -> ProjectService:
    return ProjectService(project_repository, clock=lambda: BASE_TIME)


@pytest.fixture
def submission_service(
    submission_repository: InMemorySubmissionRepository,
    project_repository: InMemoryProjectRepository,
) -> SubmissionService:
    return SubmissionService(
        submission_repository, project_repository, clock=lambda: BASE_TIME
    )


@pytest.fixture
def user_service(
    user_repository: InMemoryUserRepository,
    project_repository: InMemoryProjectRepository,
) -> UserService:
    return UserService(user_repository, project_repository)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock: FakeClock) -> RateLimiter:
    return RateLimiter(InMemoryRateLimitStore(), limit=5, window_ms=60_000, clock=clock)


@pytest.fixture
def active_project(project_service: ProjectService) -> Project:
    project, _ = project_service.create(
        {"name": "Launch Party", "client_name": "Acme Corp"}
    )
    return project


@pytest.fixture
def container(
    settings: Settings,
    project_service: ProjectService,
    submission_service: SubmissionService,
    user_service: UserService,
    rate_limiter: RateLimiter,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        project_service=project_service,
        submission_service=submission_service,
        review_service=ReviewQueueService(submission_service),
        dashboard_service=DashboardService(project_service, submission_service),
        user_service=user_service,
        rate_limiter=rate_limiter,
        close_resources=close_resources,
    )
