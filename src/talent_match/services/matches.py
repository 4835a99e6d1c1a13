"""Direct talent-to-job matching."""

from typing import List, Union

from talent_match.core.errors import (
    ConflictError,
    DuplicateKeyError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
    WorkflowError,
    is_error,
)
from talent_match.core.ids import is_valid_id
from talent_match.core.models import Match, MatchStatus, MatchView, Talent
from talent_match.services.common import ServiceBase, user_summary
from talent_match.storage.base import JobStore, MatchStore, UserStore
from talent_match.validators import MatchInput, validate


class MatchService(ServiceBase):
    """Creates and lists matches outside the application flow.

    Enforces the same rules as matches created by reviewing an application:
    only talents are matchable, only to active jobs, once per (user, job).
    """

    component = "match_service"

    def __init__(self, jobs: JobStore, users: UserStore, matches: MatchStore):
        super().__init__()
        self.jobs = jobs
        self.users = users
        self.matches = matches

    async def create_match(
        self,
        user_id: str,
        job_id: str,
        matched_by: str,
        status: Union[MatchStatus, str] = MatchStatus.MATCHED,
    ) -> Union[MatchView, WorkflowError]:
        """
        Match a talent to a job.

        Args:
            user_id: Talent being matched
            job_id: Target job
            matched_by: User creating the match (an admin, or the talent itself
                for self-service matches)
            status: Initial match status

        Returns:
            The expanded match, or a WorkflowError
        """
        request = validate(MatchInput, {
            "user_id": user_id,
            "job_id": job_id,
            "matched_by": matched_by,
            "status": status,
        })
        if is_error(request):
            return request

        try:
            user = await self.users.get(request.user_id)
            if user is None:
                return NotFoundError("User not found", entity="User")
            if not isinstance(user, Talent):
                return ValidationError(
                    "Only talent users can be matched to jobs",
                    reason="OnlyTalentsMatchable",
                )

            job = await self.jobs.get(request.job_id)
            if job is None:
                return NotFoundError("Job not found", entity="Job")
            if not job.is_active:
                return InvalidStateError("Cannot match to inactive job", reason="JobInactive")

            if await self.matches.exists(request.user_id, request.job_id):
                return self._already_matched(request.user_id, request.job_id)

            try:
                match = await self.matches.create(Match(
                    job_id=request.job_id,
                    user_id=request.user_id,
                    matched_by=request.matched_by,
                    status=request.status,
                ))
            except DuplicateKeyError:
                return self._already_matched(request.user_id, request.job_id)

            self.logger.info(
                "Match created",
                match_id=match.id,
                user_id=request.user_id,
                job_id=request.job_id,
                matched_by=request.matched_by,
                status=match.status.value,
            )
            matcher = user if request.matched_by == user.id else await self.users.get(request.matched_by)
            return MatchView(
                match=match,
                job=job.to_dict(),
                user=user_summary(user),
                matcher=user_summary(matcher),
            )
        except Exception as e:
            return self.internal_error("create_match", e, user_id=user_id, job_id=job_id)

    def _already_matched(self, user_id: str, job_id: str) -> ConflictError:
        self.logger.info("Duplicate match rejected", user_id=user_id, job_id=job_id)
        return ConflictError("User is already matched to this job", reason="AlreadyMatched")

    async def list_matches(self) -> Union[List[MatchView], WorkflowError]:
        """All matches, newest first."""
        try:
            return [await self._expand(match) for match in await self.matches.list_all()]
        except Exception as e:
            return self.internal_error("list_matches", e)

    async def matches_for_user(self, user_id: str) -> Union[List[MatchView], WorkflowError]:
        """A talent's matches, newest first."""
        if not is_valid_id(user_id):
            return NotFoundError("User not found", entity="User")
        try:
            if await self.users.get(user_id) is None:
                return NotFoundError("User not found", entity="User")
            matches = await self.matches.list_by_user(user_id)
            return [await self._expand(match, include_user=False) for match in matches]
        except Exception as e:
            return self.internal_error("matches_for_user", e, user_id=user_id)

    async def matches_for_job(self, job_id: str) -> Union[List[MatchView], WorkflowError]:
        """A job's matches, newest first."""
        if not is_valid_id(job_id):
            return NotFoundError("Job not found", entity="Job")
        try:
            if await self.jobs.get(job_id) is None:
                return NotFoundError("Job not found", entity="Job")
            matches = await self.matches.list_by_job(job_id)
            return [await self._expand(match, include_job=False) for match in matches]
        except Exception as e:
            return self.internal_error("matches_for_job", e, job_id=job_id)

    async def _expand(self, match: Match, include_user: bool = True, include_job: bool = True) -> MatchView:
        job = await self.jobs.get(match.job_id) if include_job else None
        user = await self.users.get(match.user_id) if include_user else None
        matcher = await self.users.get(match.matched_by)
        return MatchView(
            match=match,
            job=job.to_dict() if job else None,
            user=user_summary(user),
            matcher=user_summary(matcher),
        )
