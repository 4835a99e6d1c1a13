"""Tests for user and job services."""

from unittest.mock import AsyncMock

import pytest

from talent_match.core.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from talent_match.core.ids import new_id
from talent_match.core.models import Admin, Role, Talent


def register_payload(**overrides):
    payload = {
        "name": "Tom Talent",
        "email": "tom@example.com",
        "password": "Secret123",
        "location": "Berlin",
        "skills": ["python"],
    }
    payload.update(overrides)
    return payload


class TestUserService:
    """Test registration, login and listing."""

    @pytest.mark.asyncio
    async def test_register_talent(self, container, token_service):
        result = await container.users.register(register_payload())

        assert isinstance(result.user, Talent)
        assert result.user.skills == ["python"]
        assert result.user.password_hash != "Secret123"
        assert "password_hash" not in result.user.to_dict()
        assert token_service.verify(result.token).id == result.user.id

    @pytest.mark.asyncio
    async def test_register_admin_drops_talent_fields(self, container):
        result = await container.users.register(register_payload(role="admin", email="ada@example.com"))

        assert isinstance(result.user, Admin)
        assert "skills" not in result.user.to_dict()

    @pytest.mark.asyncio
    async def test_duplicate_email(self, container):
        await container.users.register(register_payload())

        result = await container.users.register(register_payload(email="TOM@example.com"))

        assert isinstance(result, ConflictError)
        assert result.reason == "EmailTaken"

    @pytest.mark.asyncio
    async def test_register_validation(self, container):
        result = await container.users.register(register_payload(password="weak"))

        assert isinstance(result, ValidationError)

    @pytest.mark.asyncio
    async def test_login(self, container):
        registered = await container.users.register(register_payload())

        result = await container.users.login({"email": "Tom@Example.com", "password": "Secret123"})

        assert result.user.id == registered.user.id
        assert result.token

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password", [
        ("tom@example.com", "Wrong1234"),
        ("nobody@example.com", "Secret123"),
    ])
    async def test_login_rejected(self, container, email, password):
        await container.users.register(register_payload())

        result = await container.users.login({"email": email, "password": password})

        assert isinstance(result, UnauthorizedError)
        assert result.message == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_current_user(self, container):
        registered = await container.users.register(register_payload())

        assert (await container.users.current_user(registered.user.id)).email == "tom@example.com"
        assert isinstance(await container.users.current_user(new_id()), NotFoundError)

    @pytest.mark.asyncio
    async def test_list_users(self, container):
        await container.users.register(register_payload())
        await container.users.register(register_payload(role="admin", email="ada@example.com"))

        assert len(await container.users.list_users()) == 2
        assert [u.role for u in await container.users.list_users("admin")] == [Role.ADMIN]
        assert len(await container.users.list_users("nonsense")) == 2
        assert [u.email for u in await container.users.list_talents()] == ["tom@example.com"]


class TestJobService:
    """Test job management."""

    @pytest.fixture
    def payload(self):
        return {
            "title": "Platform Engineer",
            "description": "Keep the deploy pipeline green.",
            "location": "Remote",
            "required_skills": ["kubernetes"],
        }

    @pytest.mark.asyncio
    async def test_create_and_get(self, container, admin, payload):
        job = await container.jobs.create(payload, admin.id)

        assert job.is_active is True
        assert job.created_by == admin.id
        assert (await container.jobs.get(job.id)).title == "Platform Engineer"

    @pytest.mark.asyncio
    async def test_create_validation(self, container, admin, payload):
        payload["title"] = "X"

        assert isinstance(await container.jobs.create(payload, admin.id), ValidationError)

    @pytest.mark.asyncio
    async def test_get_errors(self, container):
        assert isinstance(await container.jobs.get("nope"), ValidationError)
        assert isinstance(await container.jobs.get(new_id()), NotFoundError)

    @pytest.mark.asyncio
    async def test_deactivate_hides_job(self, container, job):
        deactivated = await container.jobs.deactivate(job.id)

        assert deactivated.is_active is False
        assert await container.jobs.list_active() == []

    @pytest.mark.asyncio
    async def test_delete(self, container, job, admin):
        assert await container.jobs.delete(job.id, admin.id) is True
        assert isinstance(await container.jobs.delete(job.id, admin.id), NotFoundError)
        assert isinstance(await container.jobs.deactivate(job.id), NotFoundError)

    @pytest.mark.asyncio
    async def test_store_failure(self, container, stores):
        stores.jobs.list_active = AsyncMock(side_effect=RuntimeError("down"))

        assert isinstance(await container.jobs.list_active(), InternalError)
