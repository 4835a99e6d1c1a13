"""In-process stores backed by dictionaries.

Uniqueness checks and inserts run without awaiting in between, so on a single
event loop the pair check and the insert cannot interleave with another
coroutine's insert.
"""

import copy
from collections import Counter
from typing import Dict, List, Optional, Tuple

from talent_match.core.errors import DuplicateKeyError
from talent_match.core.models import (
    Application,
    ApplicationStatus,
    Job,
    Match,
    Role,
    User,
)
from talent_match.storage.base import (
    ApplicationStore,
    JobStore,
    MatchStore,
    Stores,
    UserStore,
)


class MemoryJobStore(JobStore):
    """Dict-backed job store."""

    def __init__(self):
        self._jobs: Dict[str, Job] = {}

    async def get(self, job_id: str) -> Optional[Job]:
        job = self._jobs.get(job_id)
        return copy.deepcopy(job) if job else None

    async def create(self, job: Job) -> Job:
        if job.id in self._jobs:
            raise DuplicateKeyError("Job", {"id": job.id})
        self._jobs[job.id] = copy.deepcopy(job)
        return copy.deepcopy(job)

    async def list_active(self) -> List[Job]:
        jobs = [job for job in self._jobs.values() if job.is_active]
        jobs.sort(key=lambda job: job.created_at, reverse=True)
        return copy.deepcopy(jobs)

    async def set_active(self, job_id: str, is_active: bool) -> Optional[Job]:
        job = self._jobs.get(job_id)
        if job is None:
            return None
        job.is_active = is_active
        return copy.deepcopy(job)

    async def delete(self, job_id: str) -> bool:
        return self._jobs.pop(job_id, None) is not None


class MemoryUserStore(UserStore):
    """Dict-backed user store with a unique email index."""

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._by_email: Dict[str, str] = {}

    async def get(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return copy.deepcopy(user) if user else None

    async def get_by_email(self, email: str) -> Optional[User]:
        user_id = self._by_email.get(email.lower())
        return await self.get(user_id) if user_id else None

    async def create(self, user: User) -> User:
        email = user.email.lower()
        if email in self._by_email:
            raise DuplicateKeyError("User", {"email": email})
        if user.id in self._users:
            raise DuplicateKeyError("User", {"id": user.id})
        self._users[user.id] = copy.deepcopy(user)
        self._by_email[email] = user.id
        return copy.deepcopy(user)

    async def list(self, role: Optional[Role] = None) -> List[User]:
        users = [u for u in self._users.values() if role is None or u.role is role]
        users.sort(key=lambda user: user.created_at, reverse=True)
        return copy.deepcopy(users)


class MemoryApplicationStore(ApplicationStore):
    """Dict-backed application store with a unique (job, user) index."""

    def __init__(self):
        self._applications: Dict[str, Application] = {}
        self._by_pair: Dict[Tuple[str, str], str] = {}

    async def create(self, application: Application) -> Application:
        key = (application.job_id, application.user_id)
        if key in self._by_pair:
            raise DuplicateKeyError(
                "Application", {"job_id": key[0], "user_id": key[1]}
            )
        self._applications[application.id] = copy.deepcopy(application)
        self._by_pair[key] = application.id
        return copy.deepcopy(application)

    async def get(self, application_id: str) -> Optional[Application]:
        application = self._applications.get(application_id)
        return copy.deepcopy(application) if application else None

    async def find_by_job_and_user(self, job_id: str, user_id: str) -> Optional[Application]:
        application_id = self._by_pair.get((job_id, user_id))
        return await self.get(application_id) if application_id else None

    async def update_status(
        self,
        application_id: str,
        status: ApplicationStatus,
        reviewed_by: str,
    ) -> Optional[Application]:
        application = self._applications.get(application_id)
        if application is None:
            return None
        updated = application.reviewed(status, reviewed_by)
        self._applications[application_id] = updated
        return copy.deepcopy(updated)

    def _filtered(self, status: Optional[ApplicationStatus]) -> List[Application]:
        return [
            a for a in self._applications.values()
            if status is None or a.status is status
        ]

    async def list(
        self,
        status: Optional[ApplicationStatus] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> List[Application]:
        applications = self._filtered(status)
        applications.sort(key=lambda a: a.applied_at, reverse=True)
        return copy.deepcopy(applications[offset:offset + limit])

    async def count(self, status: Optional[ApplicationStatus] = None) -> int:
        return len(self._filtered(status))

    async def list_by_user(self, user_id: str) -> List[Application]:
        applications = [a for a in self._applications.values() if a.user_id == user_id]
        applications.sort(key=lambda a: a.applied_at, reverse=True)
        return copy.deepcopy(applications)

    async def count_by_status(self) -> Dict[str, int]:
        return dict(Counter(a.status.value for a in self._applications.values()))


class MemoryMatchStore(MatchStore):
    """Dict-backed match store with a unique (job, user) index."""

    def __init__(self):
        self._matches: Dict[str, Match] = {}
        self._by_pair: Dict[Tuple[str, str], str] = {}

    async def create(self, match: Match) -> Match:
        key = (match.user_id, match.job_id)
        if key in self._by_pair:
            raise DuplicateKeyError("Match", {"user_id": key[0], "job_id": key[1]})
        self._matches[match.id] = copy.deepcopy(match)
        self._by_pair[key] = match.id
        return copy.deepcopy(match)

    async def find_by_user_and_job(self, user_id: str, job_id: str) -> Optional[Match]:
        match_id = self._by_pair.get((user_id, job_id))
        return copy.deepcopy(self._matches[match_id]) if match_id else None

    def _newest_first(self, matches: List[Match]) -> List[Match]:
        return copy.deepcopy(sorted(matches, key=lambda m: m.created_at, reverse=True))

    async def list_all(self) -> List[Match]:
        return self._newest_first(list(self._matches.values()))

    async def list_by_user(self, user_id: str) -> List[Match]:
        return self._newest_first([m for m in self._matches.values() if m.user_id == user_id])

    async def list_by_job(self, job_id: str) -> List[Match]:
        return self._newest_first([m for m in self._matches.values() if m.job_id == job_id])


def create_memory_stores() -> Stores:
    """Build a fresh set of empty in-memory stores."""
    return Stores(
        jobs=MemoryJobStore(),
        users=MemoryUserStore(),
        applications=MemoryApplicationStore(),
        matches=MemoryMatchStore(),
    )
