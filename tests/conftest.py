"""Shared fixtures for Talent Match tests."""

import pytest
import structlog

from talent_match.core.models import Admin, Job, Talent
from talent_match.security.passwords import PasswordHasher
from talent_match.security.tokens import TokenService
from talent_match.services.applications import ApplicationWorkflow
from talent_match.services.container import ServiceContainer
from talent_match.services.matches import MatchService
from talent_match.storage.memory import create_memory_stores

TEST_SECRET = "test-secret-key"


@pytest.fixture(autouse=True)
def uncached_logging():
    """Build loggers per call so none outlives the stream it was bound to."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


@pytest.fixture
def stores():
    """Fresh in-memory stores."""
    return create_memory_stores()


@pytest.fixture
def workflow(stores):
    """Application workflow over the in-memory stores."""
    return ApplicationWorkflow(
        jobs=stores.jobs,
        users=stores.users,
        applications=stores.applications,
        matches=stores.matches,
    )


@pytest.fixture
def match_service(stores):
    """Match service over the in-memory stores."""
    return MatchService(jobs=stores.jobs, users=stores.users, matches=stores.matches)


@pytest.fixture
def hasher():
    """Password hasher cheap enough for tests."""
    return PasswordHasher(iterations=1000)


@pytest.fixture
def token_service():
    return TokenService(secret_key=TEST_SECRET, algorithm="HS256", expiration_hours=1)


@pytest.fixture
def container(stores, hasher, token_service):
    """Service container over the in-memory stores."""
    return ServiceContainer.from_stores(stores, token_service, hasher)


@pytest.fixture
async def admin(stores):
    return await stores.users.create(Admin(
        name="Ada Admin",
        email="ada@example.com",
        password_hash="x",
    ))


@pytest.fixture
async def talent(stores):
    return await stores.users.create(Talent(
        name="Tom Talent",
        email="tom@example.com",
        password_hash="x",
        location="Berlin",
        skills=["python", "sql"],
    ))


@pytest.fixture
async def job(stores, admin):
    return await stores.jobs.create(Job(
        title="Backend Engineer",
        description="Build and operate the matching service.",
        location="Remote",
        required_skills=["python"],
        created_by=admin.id,
    ))


@pytest.fixture
async def inactive_job(stores, admin):
    return await stores.jobs.create(Job(
        title="Retired Role",
        description="This posting no longer accepts applicants.",
        location="Remote",
        created_by=admin.id,
        is_active=False,
    ))
