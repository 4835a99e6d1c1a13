"""Job application workflow: apply, review, status checks and statistics."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from talent_match.core.errors import (
    ConflictError,
    DuplicateKeyError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    WorkflowError,
    is_error,
)
from talent_match.core.models import (
    Application,
    ApplicationStatus,
    ApplicationView,
    Match,
    MatchStatus,
    Talent,
)
from talent_match.services.common import ServiceBase, job_summary, user_summary
from talent_match.storage.base import ApplicationStore, JobStore, MatchStore, UserStore
from talent_match.validators import (
    ApplicationListQuery,
    ApplyInput,
    ReviewInput,
    validate,
)


class MatchSideEffect(str, Enum):
    """What happened to the match record when an application was reviewed."""
    NOT_REQUESTED = "not_requested"
    CREATED = "created"
    ALREADY_EXISTED = "already_existed"
    FAILED = "failed"


@dataclass
class ReviewOutcome:
    """Result of a review.

    The review itself succeeded; ``match_outcome`` reports the match side
    effect independently, so a failed match never turns into a failed review.
    """
    application: ApplicationView
    match_outcome: MatchSideEffect = MatchSideEffect.NOT_REQUESTED
    match: Optional[Match] = None
    match_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "application": self.application.to_dict(),
            "match_outcome": self.match_outcome.value,
            "match": self.match.to_dict() if self.match else None,
            "match_error": self.match_error,
        }


@dataclass
class ApplicationCheck:
    has_applied: bool
    application: Optional[ApplicationView] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_applied": self.has_applied,
            "application": self.application.to_dict() if self.application else None,
        }


@dataclass
class ApplicationPage:
    items: List[ApplicationView]
    total: int
    page: int
    pages: int
    limit: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "count": self.total,
            "pagination": {
                "page": self.page,
                "pages": self.pages,
                "total": self.total,
                "limit": self.limit,
            },
        }


@dataclass
class ApplicationStats:
    pending: int = 0
    matched: int = 0
    rejected: int = 0
    withdrawn: int = 0
    total: int = 0

    @classmethod
    def from_counts(cls, counts: Dict[str, int]) -> "ApplicationStats":
        """Build from raw per-status counts, ignoring values outside the status enum."""
        known = {status.value: counts.get(status.value, 0) for status in ApplicationStatus}
        return cls(total=sum(known.values()), **known)

    def to_dict(self) -> Dict[str, int]:
        return {
            "pending": self.pending,
            "matched": self.matched,
            "rejected": self.rejected,
            "withdrawn": self.withdrawn,
            "total": self.total,
        }


class ApplicationWorkflow(ServiceBase):
    """Owns the lifecycle of job applications.

    ``pending`` is the initial state; ``review`` moves an application to
    ``matched``, ``rejected`` or ``withdrawn``. Reviewing to ``matched`` also
    creates the corresponding match if none exists yet.
    """

    component = "application_workflow"

    def __init__(
        self,
        jobs: JobStore,
        users: UserStore,
        applications: ApplicationStore,
        matches: MatchStore,
    ):
        super().__init__()
        self.jobs = jobs
        self.users = users
        self.applications = applications
        self.matches = matches

    async def apply(self, job_id: str, user_id: str) -> Union[ApplicationView, WorkflowError]:
        """
        Create a pending application for a talent.

        Checks run in order and the first failure is returned: id format,
        job existence and activity, user existence and role, duplicate.

        Args:
            job_id: Job being applied to
            user_id: Applying user

        Returns:
            The expanded application, or a WorkflowError
        """
        request = validate(ApplyInput, {"job_id": job_id})
        if is_error(request):
            self.logger.info("Application rejected: invalid input", job_id=job_id, details=request.details)
            return request

        try:
            job = await self.jobs.get(job_id)
            if job is None:
                return NotFoundError("Job not found", entity="Job")
            if not job.is_active:
                return InvalidStateError("Job is no longer active", reason="JobInactive")

            user = await self.users.get(user_id)
            if user is None:
                return NotFoundError("User not found", entity="User")
            if not isinstance(user, Talent):
                return ForbiddenError("Only talents can apply for jobs", reason="RoleMismatch")

            existing = await self.applications.find_by_job_and_user(job_id, user_id)
            if existing is not None:
                return self._duplicate_application(job_id, user_id)

            try:
                application = await self.applications.create(
                    Application(job_id=job_id, user_id=user_id)
                )
            except DuplicateKeyError:
                return self._duplicate_application(job_id, user_id)

            self.logger.info(
                "Application created",
                application_id=application.id,
                job_id=job_id,
                user_id=user_id,
            )
            return ApplicationView(
                application=application,
                job=job_summary(job),
                user=user_summary(user),
            )
        except Exception as e:
            return self.internal_error("apply", e, job_id=job_id, user_id=user_id)

    def _duplicate_application(self, job_id: str, user_id: str) -> ConflictError:
        self.logger.info("Duplicate application rejected", job_id=job_id, user_id=user_id)
        return ConflictError(
            "You have already applied for this job",
            reason="DuplicateApplication",
        )

    async def review(
        self,
        application_id: str,
        status: Union[ApplicationStatus, str],
        reviewer_id: str,
    ) -> Union[ReviewOutcome, WorkflowError]:
        """
        Set an application's status on behalf of a reviewer.

        Reviewing an application that is no longer pending is allowed; the
        status is overwritten. When the new status is ``matched`` a match is
        created for the (user, job) pair unless one exists. Match creation is
        best-effort and reported in the outcome, as is loading the job, applicant
        and reviewer summaries.
        """
        request = validate(ReviewInput, {
            "application_id": application_id,
            "status": status,
            "reviewer_id": reviewer_id,
        })
        if is_error(request):
            self.logger.info(
                "Review rejected: invalid input",
                application_id=application_id,
                details=request.details,
            )
            return request

        try:
            current = await self.applications.get(application_id)
            if current is None:
                return NotFoundError("Application not found", entity="Application")
            if current.is_terminal:
                self.logger.warning(
                    "Re-reviewing application that is no longer pending",
                    application_id=application_id,
                    previous_status=current.status.value,
                    new_status=request.status.value,
                )

            updated = await self.applications.update_status(
                application_id, request.status, reviewer_id
            )
            if updated is None:
                return NotFoundError("Application not found", entity="Application")

            self.logger.info(
                "Application reviewed",
                application_id=application_id,
                status=updated.status.value,
                reviewer_id=reviewer_id,
            )
        except Exception as e:
            return self.internal_error(
                "review", e, application_id=application_id, reviewer_id=reviewer_id
            )

        outcome = ReviewOutcome(application=ApplicationView(application=updated))
        if updated.status is ApplicationStatus.MATCHED:
            outcome.match_outcome, outcome.match, outcome.match_error = (
                await self._ensure_match(updated, reviewer_id)
            )
        outcome.application = await self._expand_quietly(updated)
        return outcome

    async def _ensure_match(
        self,
        application: Application,
        reviewer_id: str,
    ) -> Tuple[MatchSideEffect, Optional[Match], Optional[str]]:
        """Create the match for a matched application; never raises."""
        try:
            existing = await self.matches.find_by_user_and_job(
                application.user_id, application.job_id
            )
            if existing is not None:
                return MatchSideEffect.ALREADY_EXISTED, existing, None

            match = await self.matches.create(Match(
                job_id=application.job_id,
                user_id=application.user_id,
                matched_by=reviewer_id,
                status=MatchStatus.MATCHED,
            ))
            self.logger.info(
                "Match created from review",
                match_id=match.id,
                application_id=application.id,
            )
            return MatchSideEffect.CREATED, match, None
        except DuplicateKeyError:
            # Lost a race with a concurrent creator
            existing = await self._find_match_quietly(application)
            return MatchSideEffect.ALREADY_EXISTED, existing, None
        except Exception as e:
            self.logger.error(
                "Error creating match record",
                application_id=application.id,
                job_id=application.job_id,
                user_id=application.user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return MatchSideEffect.FAILED, None, "Match creation failed"

    async def _find_match_quietly(self, application: Application) -> Optional[Match]:
        try:
            return await self.matches.find_by_user_and_job(
                application.user_id, application.job_id
            )
        except Exception as e:
            self.logger.warning("Could not reload existing match", error=str(e))
            return None

    async def _expand_quietly(self, application: Application) -> ApplicationView:
        """Expand a stored application, falling back to the bare record."""
        try:
            return await self._expand(application)
        except Exception as e:
            self.logger.warning(
                "Could not expand reviewed application",
                application_id=application.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ApplicationView(application=application)

    async def check_status(
        self,
        job_id: str,
        user_id: str,
    ) -> Union[ApplicationCheck, WorkflowError]:
        """Report whether a user has applied to a job."""
        try:
            application = await self.applications.find_by_job_and_user(job_id, user_id)
            if application is None:
                return ApplicationCheck(has_applied=False)
            return ApplicationCheck(has_applied=True, application=await self._expand(application))
        except Exception as e:
            return self.internal_error("check_status", e, job_id=job_id, user_id=user_id)

    async def list_applications(
        self,
        status: Optional[Union[ApplicationStatus, str]] = None,
        page: Any = 1,
        limit: Any = 10,
    ) -> Union[ApplicationPage, WorkflowError]:
        """A page of applications, most recently applied first."""
        query = validate(ApplicationListQuery, {"page": page, "limit": limit, "status": status})
        if is_error(query):
            return query

        try:
            offset = (query.page - 1) * query.limit
            records = await self.applications.list(
                status=query.status, offset=offset, limit=query.limit
            )
            total = await self.applications.count(status=query.status)
            items = [await self._expand(record) for record in records]
        except Exception as e:
            return self.internal_error("list_applications", e, page=query.page, limit=query.limit)

        return ApplicationPage(
            items=items,
            total=total,
            page=query.page,
            pages=math.ceil(total / query.limit),
            limit=query.limit,
        )

    async def applications_for_user(self, user_id: str) -> Union[List[ApplicationView], WorkflowError]:
        """A talent's own applications, most recently applied first."""
        try:
            records = await self.applications.list_by_user(user_id)
            return [await self._expand(record, include_user=False) for record in records]
        except Exception as e:
            return self.internal_error("applications_for_user", e, user_id=user_id)

    async def stats(self) -> Union[ApplicationStats, WorkflowError]:
        """Counts per status plus the total."""
        try:
            counts = await self.applications.count_by_status()
        except Exception as e:
            return self.internal_error("stats", e)
        return ApplicationStats.from_counts(counts)

    async def _expand(self, application: Application, include_user: bool = True) -> ApplicationView:
        job = await self.jobs.get(application.job_id)
        user = await self.users.get(application.user_id) if include_user else None
        reviewer = (
            await self.users.get(application.reviewed_by)
            if application.reviewed_by else None
        )
        return ApplicationView(
            application=application,
            job=job_summary(job),
            user=user_summary(user),
            reviewer=user_summary(reviewer),
        )
