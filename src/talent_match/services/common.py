"""Helpers shared by the service layer."""

from typing import Any, Dict, Optional

from talent_match.core.errors import InternalError
from talent_match.core.models import Job, User
from talent_match.utils.logging import get_logger, log_operation_failure

logger = get_logger(__name__)


def job_summary(job: Optional[Job]) -> Optional[Dict[str, Any]]:
    return job.summary() if job else None


def user_summary(user: Optional[User]) -> Optional[Dict[str, Any]]:
    return user.summary() if user else None


class ServiceBase:
    """Common plumbing: a component-bound logger and internal-error conversion."""

    component = "service"

    def __init__(self):
        self.logger = logger.bind(component=self.component)

    def internal_error(self, operation: str, error: Exception, **identifiers: Any) -> InternalError:
        """Log an unexpected failure with context and return a generic error result."""
        self.logger.error(
            "Unexpected failure",
            **log_operation_failure(operation, error, **identifiers),
        )
        return InternalError("Internal server error")
