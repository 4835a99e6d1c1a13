"""Store contracts used by the services.

Each store owns one entity type. Stores enforce natural-key uniqueness on
insert and raise ``DuplicateKeyError`` when it is violated; services may
check beforehand for a friendlier message, but the store's insert is the
guarantee.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

from talent_match.core.models import (
    Application,
    ApplicationStatus,
    Job,
    Match,
    Role,
    User,
)


class JobStore(ABC):
    """Persistence for job postings."""

    @abstractmethod
    async def get(self, job_id: str) -> Optional[Job]:
        """Fetch a job by id."""

    @abstractmethod
    async def create(self, job: Job) -> Job:
        """Insert a new job."""

    @abstractmethod
    async def list_active(self) -> List[Job]:
        """Active jobs, newest first."""

    @abstractmethod
    async def set_active(self, job_id: str, is_active: bool) -> Optional[Job]:
        """Flip the active flag. Returns None if the job does not exist."""

    @abstractmethod
    async def delete(self, job_id: str) -> bool:
        """Hard-delete a job. Returns False if it did not exist."""


class UserStore(ABC):
    """Persistence for users. Email is unique."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[User]:
        """Fetch a user by id."""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Fetch a user by (lowercased) email."""

    @abstractmethod
    async def create(self, user: User) -> User:
        """Insert a new user; raises DuplicateKeyError on a taken email."""

    @abstractmethod
    async def list(self, role: Optional[Role] = None) -> List[User]:
        """Users, newest first, optionally filtered by role."""


class ApplicationStore(ABC):
    """Persistence for applications. (job_id, user_id) is unique."""

    @abstractmethod
    async def create(self, application: Application) -> Application:
        """Insert; raises DuplicateKeyError if the pair already applied."""

    @abstractmethod
    async def get(self, application_id: str) -> Optional[Application]:
        """Fetch an application by id."""

    @abstractmethod
    async def find_by_job_and_user(self, job_id: str, user_id: str) -> Optional[Application]:
        """Fetch the application for a (job, user) pair."""

    @abstractmethod
    async def update_status(
        self,
        application_id: str,
        status: ApplicationStatus,
        reviewed_by: str,
    ) -> Optional[Application]:
        """Set status, reviewer and review time. Returns None if missing."""

    @abstractmethod
    async def list(
        self,
        status: Optional[ApplicationStatus] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> List[Application]:
        """A page of applications, most recently applied first."""

    @abstractmethod
    async def count(self, status: Optional[ApplicationStatus] = None) -> int:
        """Number of applications matching the filter."""

    @abstractmethod
    async def list_by_user(self, user_id: str) -> List[Application]:
        """A user's applications, most recently applied first."""

    @abstractmethod
    async def count_by_status(self) -> Dict[str, int]:
        """Raw counts grouped by the stored status value."""


class MatchStore(ABC):
    """Persistence for matches. (job_id, user_id) is unique."""

    @abstractmethod
    async def create(self, match: Match) -> Match:
        """Insert; raises DuplicateKeyError if the pair is already matched."""

    @abstractmethod
    async def find_by_user_and_job(self, user_id: str, job_id: str) -> Optional[Match]:
        """Fetch the match for a (user, job) pair."""

    async def exists(self, user_id: str, job_id: str) -> bool:
        """Check whether the pair is already matched."""
        return await self.find_by_user_and_job(user_id, job_id) is not None

    @abstractmethod
    async def list_all(self) -> List[Match]:
        """All matches, newest first."""

    @abstractmethod
    async def list_by_user(self, user_id: str) -> List[Match]:
        """A talent's matches, newest first."""

    @abstractmethod
    async def list_by_job(self, job_id: str) -> List[Match]:
        """A job's matches, newest first."""


@dataclass
class Stores:
    """The four stores a service container is wired with."""
    jobs: JobStore
    users: UserStore
    applications: ApplicationStore
    matches: MatchStore
