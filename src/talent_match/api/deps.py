"""Request dependencies: service container access, authentication and role checks."""

from typing import Any, Callable, Coroutine, Union

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from talent_match.core.errors import (
    ForbiddenError,
    UnauthorizedError,
    WorkflowError,
    is_error,
)
from talent_match.core.models import Role
from talent_match.security.tokens import TokenClaims
from talent_match.services.container import ServiceContainer

security = HTTPBearer(auto_error=False)


class WorkflowHTTPError(Exception):
    """Carries a WorkflowError out of a route to the exception handler."""

    def __init__(self, error: WorkflowError):
        self.error = error
        super().__init__(error.message)


def unwrap(result: Any) -> Any:
    """Return a service result, raising WorkflowHTTPError if it is an error."""
    if is_error(result):
        raise WorkflowHTTPError(result)
    return result


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


async def get_current_user(
    credentials: Union[HTTPAuthorizationCredentials, None] = Depends(security),
    container: ServiceContainer = Depends(get_container),
) -> TokenClaims:
    """Verify the Bearer token and return its claims."""
    if not credentials:
        raise WorkflowHTTPError(UnauthorizedError(
            "Access token is required. Please provide a valid Bearer token in the Authorization header"
        ))
    return unwrap(container.tokens.verify(credentials.credentials))


def require_roles(*roles: Role) -> Callable[..., Coroutine[Any, Any, TokenClaims]]:
    """Dependency factory allowing only the given roles through."""

    async def dependency(user: TokenClaims = Depends(get_current_user)) -> TokenClaims:
        if user.role not in roles:
            allowed = ", ".join(role.value for role in roles)
            raise WorkflowHTTPError(ForbiddenError(
                f"Access forbidden. Required role(s): {allowed}. Your role: {user.role.value}",
                reason="RoleMismatch",
            ))
        return user

    return dependency


require_admin = require_roles(Role.ADMIN)
require_talent = require_roles(Role.TALENT)
