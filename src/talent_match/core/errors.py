"""Result error taxonomy and store exceptions.

Services never raise ``WorkflowError`` values; they return them so the HTTP
layer can map each kind to a status code. Stores raise ``StoreError`` and its
subclasses, which the services translate.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional


@dataclass(frozen=True)
class WorkflowError:
    """Base class for business-rule and infrastructure failures."""
    message: str
    details: List[str] = field(default_factory=list)
    
    code: ClassVar[str] = "error"
    http_status: ClassVar[int] = 500
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": list(self.details) or None,
        }


@dataclass(frozen=True)
class ValidationError(WorkflowError):
    """Malformed or missing input."""
    reason: Optional[str] = None
    
    code: ClassVar[str] = "validation_error"
    http_status: ClassVar[int] = 400


@dataclass(frozen=True)
class NotFoundError(WorkflowError):
    """A referenced entity does not exist."""
    entity: str = ""
    
    code: ClassVar[str] = "not_found"
    http_status: ClassVar[int] = 404


@dataclass(frozen=True)
class ForbiddenError(WorkflowError):
    """The acting user has the wrong role."""
    reason: Optional[str] = None
    
    code: ClassVar[str] = "forbidden"
    http_status: ClassVar[int] = 403


@dataclass(frozen=True)
class InvalidStateError(WorkflowError):
    """The entity is in a state that forbids the operation."""
    reason: Optional[str] = None
    
    code: ClassVar[str] = "invalid_state"
    http_status: ClassVar[int] = 400


@dataclass(frozen=True)
class ConflictError(WorkflowError):
    """A record with the same natural key already exists."""
    reason: Optional[str] = None
    
    code: ClassVar[str] = "conflict"
    http_status: ClassVar[int] = 409


@dataclass(frozen=True)
class UnauthorizedError(WorkflowError):
    """Missing, invalid or expired credentials."""
    
    code: ClassVar[str] = "unauthorized"
    http_status: ClassVar[int] = 401


@dataclass(frozen=True)
class InternalError(WorkflowError):
    """Persistence or infrastructure failure. The message is always generic."""
    
    code: ClassVar[str] = "internal_error"
    http_status: ClassVar[int] = 500


def is_error(result: Any) -> bool:
    """Return True when a service result is a ``WorkflowError``."""
    return isinstance(result, WorkflowError)


class StoreError(Exception):
    """Raised by stores when the backing storage fails."""


class DuplicateKeyError(StoreError):
    """Raised by stores when an insert violates a unique key."""
    
    def __init__(self, entity: str, key: Dict[str, Any]):
        self.entity = entity
        self.key = key
        super().__init__(f"Duplicate {entity} for key {key}")
