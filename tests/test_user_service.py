"""Tests for accounts and project access."""

from uuid import uuid4

import pytest

from centerstage.domain.projects import Project
from centerstage.errors import ForbiddenError, NotFoundError, ValidationError
from centerstage.security import verify_password
from centerstage.services.projects import ProjectService
from centerstage.services.users import UserService
from tests.conftest import TEST_PASSWORD, InMemoryUserRepository


def test_create_user_returns_one_time_password(user_service: UserService) -> None:
    user, password = user_service.create_user(" Ops@Example.com ", "Ops", "admin")

    assert user.email == "ops@example.com"
    assert len(password) == 12
    assert user.password_hash != password
    assert verify_password(password, user.password_hash)


def test_create_user_rejects_duplicate_email(user_service: UserService) -> None:
    user_service.create_user("ops@example.com", "Ops")

    with pytest.raises(ValidationError):
        user_service.create_user("OPS@example.com", "Other")


def test_create_user_rejects_unknown_role(user_service: UserService) -> None:
    with pytest.raises(ValidationError):
        user_service.create_user("ops@example.com", "Ops", "owner")


def test_authenticate(
    user_service: UserService, user_repository: InMemoryUserRepository
) -> None:
    user = user_repository.add_user("admin@example.com")

    assert user_service.authenticate("ADMIN@example.com", TEST_PASSWORD) == user
    assert user_service.authenticate("admin@example.com", "wrong") is None
    assert user_service.authenticate("nobody@example.com", TEST_PASSWORD) is None


def test_reset_and_set_password(
    user_service: UserService, user_repository: InMemoryUserRepository
) -> None:
    user = user_repository.add_user("admin@example.com")

    generated = user_service.reset_password(user.id)
    assert user_service.authenticate(user.email, generated) is not None

    user_service.set_password(user.id, "new-password-1")
    assert user_service.authenticate(user.email, "new-password-1") is not None

    with pytest.raises(ValidationError):
        user_service.set_password(user.id, "short")


def test_delete_user_refuses_self(
    user_service: UserService, user_repository: InMemoryUserRepository
) -> None:
    admin = user_repository.add_user("root@example.com", role="super_admin")
    other = user_repository.add_user("ops@example.com")

    with pytest.raises(ForbiddenError):
        user_service.delete_user(admin.id, admin.id)

    user_service.delete_user(other.id, admin.id)
    with pytest.raises(NotFoundError):
        user_service.get(other.id)


def test_access_follows_role_and_assignments(
    user_service: UserService,
    user_repository: InMemoryUserRepository,
    project_service: ProjectService,
    active_project: Project,
) -> None:
    other, _ = project_service.create({"name": "Other Event", "client_name": "Acme"})
    super_admin = user_repository.add_user("root@example.com", role="super_admin")
    admin = user_repository.add_user("ops@example.com")
    user_service.assign(admin.id, active_project.id, super_admin.id)

    assert set(user_service.accessible_project_ids(super_admin.id)) == {
        active_project.id,
        other.id,
    }
    assert user_service.accessible_project_ids(admin.id) == [active_project.id]
    assert user_service.has_project_access(admin.id, active_project.id)
    assert not user_service.has_project_access(admin.id, other.id)
    with pytest.raises(ForbiddenError):
        user_service.require_project_access(admin.id, other.id)
    with pytest.raises(ForbiddenError):
        user_service.require_super_admin(admin.id)


def test_assign_rejects_duplicates_and_unknown_projects(
    user_service: UserService,
    user_repository: InMemoryUserRepository,
    active_project: Project,
) -> None:
    admin = user_repository.add_user("ops@example.com")
    user_service.assign(admin.id, active_project.id, None)

    with pytest.raises(ValidationError):
        user_service.assign(admin.id, active_project.id, None)
    with pytest.raises(NotFoundError):
        user_service.assign(admin.id, uuid4(), None)


def test_set_assignments_replaces_existing(
    user_service: UserService,
    user_repository: InMemoryUserRepository,
    project_service: ProjectService,
    active_project: Project,
) -> None:
    other, _ = project_service.create({"name": "Other Event", "client_name": "Acme"})
    admin = user_repository.add_user("ops@example.com")
    user_service.assign(admin.id, active_project.id, None)

    assignments = user_service.set_assignments(admin.id, [other.id], None)

    assert [a.project_id for a in assignments] == [other.id]
    user_service.unassign(admin.id, other.id)
    assert user_service.list_assignments(admin.id) == []
