"""
Talent Match: a job marketplace backend.

Talents register, browse active jobs and apply; admins post jobs, review
applications and match talents to jobs, either through a review or directly.
"""

__version__ = "0.1.0"

from talent_match.core.models import (
    Application,
    ApplicationStatus,
    Job,
    Match,
    MatchStatus,
    Role,
)
from talent_match.services.applications import ApplicationWorkflow
from talent_match.services.matches import MatchService

__all__ = [
    "Application",
    "ApplicationStatus",
    "ApplicationWorkflow",
    "Job",
    "Match",
    "MatchService",
    "MatchStatus",
    "Role",
]
