"""API routes for Talent Match."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from talent_match import __version__
from talent_match.api.deps import (
    get_container,
    get_current_user,
    require_admin,
    require_talent,
    unwrap,
)
from talent_match.api.models import (
    ApplyRequest,
    HealthCheck,
    JobCreateRequest,
    LoginRequest,
    MatchCreateRequest,
    RegisterRequest,
    ReviewRequest,
    SelfMatchRequest,
)
from talent_match.config import settings
from talent_match.core.models import MatchStatus
from talent_match.security.tokens import TokenClaims
from talent_match.services.container import ServiceContainer
from talent_match.utils.logging import get_logger

logger = get_logger(__name__)

# Create routers
auth_router = APIRouter(prefix="/auth", tags=["auth"])
jobs_router = APIRouter(prefix="/jobs", tags=["jobs"])
users_router = APIRouter(prefix="/users", tags=["users"])
talents_router = APIRouter(prefix="/talents", tags=["talents"])
applications_router = APIRouter(prefix="/applications", tags=["applications"])
matches_router = APIRouter(prefix="/matches", tags=["matches"])
health_router = APIRouter(prefix="/health", tags=["health"])


def _created(data, message: Optional[str] = None, **extra) -> JSONResponse:
    body = {"success": True, "data": data, **extra}
    if message:
        body["message"] = message
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=body)


# --- auth ---

@auth_router.post("/register")
async def register(
    request: RegisterRequest,
    container: ServiceContainer = Depends(get_container),
):
    """Register a talent or admin account."""
    result = unwrap(await container.users.register(request.model_dump(exclude_none=True)))
    return _created(result.user.to_dict(), token=result.token)


@auth_router.post("/login")
async def login(
    request: LoginRequest,
    container: ServiceContainer = Depends(get_container),
):
    result = unwrap(await container.users.login(request.model_dump(exclude_none=True)))
    return {"success": True, "token": result.token, "data": result.user.to_dict()}


@auth_router.get("/me")
async def me(
    user: TokenClaims = Depends(get_current_user),
    container: ServiceContainer = Depends(get_container),
):
    current = unwrap(await container.users.current_user(user.id))
    return {"success": True, "data": current.to_dict()}


# --- jobs ---

@jobs_router.get("")
async def list_jobs(container: ServiceContainer = Depends(get_container)):
    """List active jobs, newest first."""
    jobs = unwrap(await container.jobs.list_active())
    return {"success": True, "count": len(jobs), "data": [job.to_dict() for job in jobs]}


@jobs_router.get("/{job_id}")
async def get_job(job_id: str, container: ServiceContainer = Depends(get_container)):
    job = unwrap(await container.jobs.get(job_id))
    return {"success": True, "data": job.to_dict()}


@jobs_router.post("")
async def create_job(
    request: JobCreateRequest,
    admin: TokenClaims = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
):
    job = unwrap(await container.jobs.create(request.model_dump(exclude_none=True), admin.id))
    return _created(job.to_dict())


@jobs_router.patch("/{job_id}/deactivate")
async def deactivate_job(
    job_id: str,
    admin: TokenClaims = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
):
    job = unwrap(await container.jobs.deactivate(job_id))
    return {"success": True, "data": job.to_dict()}


@jobs_router.delete("/{job_id}")
async def delete_job(
    job_id: str,
    admin: TokenClaims = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
):
    unwrap(await container.jobs.delete(job_id, admin.id))
    return {"success": True, "message": "Job deleted successfully"}


# --- users ---

@users_router.get("")
async def list_users(
    role: Optional[str] = Query(None, description="Filter by role"),
    admin: TokenClaims = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
):
    users = unwrap(await container.users.list_users(role))
    return {"success": True, "count": len(users), "data": [user.to_dict() for user in users]}


@talents_router.get("")
async def list_talents(container: ServiceContainer = Depends(get_container)):
    talents = unwrap(await container.users.list_talents())
    return {"success": True, "count": len(talents), "data": [talent.to_dict() for talent in talents]}


# --- applications ---

@applications_router.post("/apply")
async def apply_for_job(
    request: ApplyRequest,
    talent: TokenClaims = Depends(require_talent),
    container: ServiceContainer = Depends(get_container),
):
    """Apply the current talent to a job."""
    application = unwrap(await container.applications.apply(request.job_id, talent.id))
    return _created(application.to_dict(), message="Application submitted successfully")


@applications_router.get("/my-applications")
async def my_applications(
    talent: TokenClaims = Depends(require_talent),
    container: ServiceContainer = Depends(get_container),
):
    applications = unwrap(await container.applications.applications_for_user(talent.id))
    return {
        "success": True,
        "count": len(applications),
        "data": [application.to_dict() for application in applications],
    }


@applications_router.get("/check/{job_id}")
async def check_application_status(
    job_id: str,
    talent: TokenClaims = Depends(require_talent),
    container: ServiceContainer = Depends(get_container),
):
    check = unwrap(await container.applications.check_status(job_id, talent.id))
    return {"success": True, "data": check.to_dict()}


@applications_router.get("/stats")
async def application_stats(
    admin: TokenClaims = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
):
    stats = unwrap(await container.applications.stats())
    return {"success": True, "data": stats.to_dict()}


@applications_router.get("")
async def list_applications(
    page: Optional[str] = Query(None, description="1-based page number"),
    limit: Optional[str] = Query(None, description="Page size, at most 100"),
    status_filter: Optional[str] = Query(None, alias="status", description="Status filter"),
    admin: TokenClaims = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
):
    """Paginated applications for review."""
    result = unwrap(await container.applications.list_applications(
        status=status_filter or None,
        page=page if page is not None else 1,
        limit=limit if limit is not None else settings.default_page_size,
    ))
    body = result.to_dict()
    return {
        "success": True,
        "count": body["count"],
        "pagination": body["pagination"],
        "data": body["items"],
    }


@applications_router.patch("/{application_id}/review")
async def review_application(
    application_id: str,
    request: ReviewRequest,
    admin: TokenClaims = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
):
    """Review an application; matching it also creates the match record."""
    outcome = unwrap(await container.applications.review(application_id, request.status, admin.id))
    if outcome.match_error:
        logger.warning(
            "Review succeeded without match record",
            application_id=application_id,
            match_error=outcome.match_error,
        )
    return {
        "success": True,
        "data": outcome.application.to_dict(),
        "match_outcome": outcome.match_outcome.value,
        "match": outcome.match.to_dict() if outcome.match else None,
    }


# --- matches ---

@matches_router.get("")
async def list_matches(
    admin: TokenClaims = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
):
    matches = unwrap(await container.matches.list_matches())
    return {"success": True, "count": len(matches), "data": [match.to_dict() for match in matches]}


@matches_router.post("")
async def create_match(
    request: MatchCreateRequest,
    admin: TokenClaims = Depends(require_admin),
    container: ServiceContainer = Depends(get_container),
):
    """Match a talent to a job directly."""
    match = unwrap(await container.matches.create_match(
        user_id=request.user_id,
        job_id=request.job_id,
        matched_by=admin.id,
        status=request.status or MatchStatus.MATCHED,
    ))
    return _created(match.to_dict())


@matches_router.post("/apply")
async def self_match(
    request: SelfMatchRequest,
    talent: TokenClaims = Depends(require_talent),
    container: ServiceContainer = Depends(get_container),
):
    """Let a talent record interest in a job as an ``applied`` match."""
    match = unwrap(await container.matches.create_match(
        user_id=talent.id,
        job_id=request.job_id,
        matched_by=talent.id,
        status=MatchStatus.APPLIED,
    ))
    return _created(match.to_dict())


@matches_router.get("/my-matches")
async def my_matches(
    talent: TokenClaims = Depends(require_talent),
    container: ServiceContainer = Depends(get_container),
):
    matches = unwrap(await container.matches.matches_for_user(talent.id))
    return {"success": True, "count": len(matches), "data": [match.to_dict() for match in matches]}


# --- health ---

@health_router.get("", response_model=HealthCheck)
async def health(container: ServiceContainer = Depends(get_container)):
    return HealthCheck(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        components={
            "storage": "sql" if container.database is not None else "memory",
        },
    )


all_routers = [
    auth_router,
    jobs_router,
    users_router,
    talents_router,
    applications_router,
    matches_router,
    health_router,
]
