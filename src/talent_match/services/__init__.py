"""Service layer: business rules over injected stores."""

from .applications import (
    ApplicationCheck,
    ApplicationPage,
    ApplicationStats,
    ApplicationWorkflow,
    MatchSideEffect,
    ReviewOutcome,
)
from .container import ServiceContainer, build_container
from .jobs import JobService
from .matches import MatchService
from .users import AuthResult, UserService

__all__ = [
    "ApplicationCheck",
    "ApplicationPage",
    "ApplicationStats",
    "ApplicationWorkflow",
    "MatchSideEffect",
    "ReviewOutcome",
    "ServiceContainer",
    "build_container",
    "JobService",
    "MatchService",
    "AuthResult",
    "UserService",
]
