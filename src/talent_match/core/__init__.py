"""Core domain types for Talent Match."""

from .errors import (
    WorkflowError,
    ValidationError,
    NotFoundError,
    ForbiddenError,
    InvalidStateError,
    ConflictError,
    UnauthorizedError,
    InternalError,
    StoreError,
    DuplicateKeyError,
    is_error,
)
from .models import (
    Role,
    ApplicationStatus,
    MatchStatus,
    Job,
    Talent,
    Admin,
    User,
    Application,
    Match,
)

__all__ = [
    "WorkflowError",
    "ValidationError",
    "NotFoundError",
    "ForbiddenError",
    "InvalidStateError",
    "ConflictError",
    "UnauthorizedError",
    "InternalError",
    "StoreError",
    "DuplicateKeyError",
    "is_error",
    "Role",
    "ApplicationStatus",
    "MatchStatus",
    "Job",
    "Talent",
    "Admin",
    "User",
    "Application",
    "Match",
]
