"""Core data models for Talent Match."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from talent_match.core.ids import new_id


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Role(str, Enum):
    """User roles."""
    TALENT = "talent"
    ADMIN = "admin"


class ApplicationStatus(str, Enum):
    """Application lifecycle states. ``pending`` is the only initial state."""
    PENDING = "pending"
    MATCHED = "matched"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

    @classmethod
    def values(cls) -> List[str]:
        return [status.value for status in cls]


class MatchStatus(str, Enum):
    """Match states."""
    MATCHED = "matched"
    VIEWED = "viewed"
    APPLIED = "applied"


@dataclass
class Job:
    """A job posting."""
    title: str
    description: str
    location: str
    created_by: str
    required_skills: List[str] = field(default_factory=list)
    is_active: bool = True
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "location": self.location,
            "is_active": self.is_active,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "required_skills": list(self.required_skills),
            "is_active": self.is_active,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class _UserBase:
    name: str
    email: str
    password_hash: str
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Public profile; the password hash is never included."""
        return {
            "user_id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Talent(_UserBase):
    """A user who applies to jobs and can be matched."""
    location: Optional[str] = None
    skills: List[str] = field(default_factory=list)

    @property
    def role(self) -> Role:
        return Role.TALENT

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["location"] = self.location
        data["skills"] = list(self.skills)
        return data


@dataclass
class Admin(_UserBase):
    """A user who posts jobs, reviews applications and creates matches."""

    @property
    def role(self) -> Role:
        return Role.ADMIN


User = Union[Talent, Admin]


def build_user(role: Union[Role, str], **fields: Any) -> User:
    """Create the user variant for a role. Talent-only fields are dropped for admins."""
    role = Role(role)
    if role is Role.TALENT:
        return Talent(**fields)
    fields.pop("location", None)
    fields.pop("skills", None)
    return Admin(**fields)


@dataclass
class Application:
    """A talent's application to a job. (job_id, user_id) is unique."""
    job_id: str
    user_id: str
    status: ApplicationStatus = ApplicationStatus.PENDING
    id: str = field(default_factory=new_id)
    applied_at: datetime = field(default_factory=utc_now)
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not ApplicationStatus.PENDING

    def reviewed(self, status: ApplicationStatus, reviewer_id: str) -> "Application":
        """Return a copy with the review fields set; nothing else changes."""
        return replace(self, status=status, reviewed_by=reviewer_id, reviewed_at=utc_now())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "job_id": self.job_id,
            "user_id": self.user_id,
            "status": self.status.value,
            "applied_at": self.applied_at.isoformat(),
            "reviewed_by": self.reviewed_by,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
        }


@dataclass
class Match:
    """A talent matched to a job. (job_id, user_id) is unique."""
    job_id: str
    user_id: str
    matched_by: str
    status: MatchStatus = MatchStatus.MATCHED
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "job_id": self.job_id,
            "user_id": self.user_id,
            "matched_by": self.matched_by,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class ApplicationView:
    """An application expanded with its job, applicant and reviewer summaries."""
    application: Application
    job: Optional[Dict[str, Any]] = None
    user: Optional[Dict[str, Any]] = None
    reviewer: Optional[Dict[str, Any]] = None

    @property
    def id(self) -> str:
        return self.application.id

    @property
    def status(self) -> ApplicationStatus:
        return self.application.status

    def to_dict(self) -> Dict[str, Any]:
        data = self.application.to_dict()
        data["job"] = self.job
        data["user"] = self.user
        data["reviewer"] = self.reviewer
        return data


@dataclass
class MatchView:
    """A match expanded with its job, talent and matcher summaries."""
    match: Match
    job: Optional[Dict[str, Any]] = None
    user: Optional[Dict[str, Any]] = None
    matcher: Optional[Dict[str, Any]] = None

    @property
    def id(self) -> str:
        return self.match.id

    def to_dict(self) -> Dict[str, Any]:
        data = self.match.to_dict()
        data["job"] = self.job
        data["user"] = self.user
        data["matcher"] = self.matcher
        return data
