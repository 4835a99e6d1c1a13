"""User registration, login and listing."""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from talent_match.core.errors import (
    ConflictError,
    DuplicateKeyError,
    NotFoundError,
    UnauthorizedError,
    WorkflowError,
    is_error,
)
from talent_match.core.models import Role, User, build_user
from talent_match.security.passwords import PasswordHasher
from talent_match.security.tokens import TokenService
from talent_match.services.common import ServiceBase
from talent_match.storage.base import UserStore
from talent_match.validators import LoginInput, RegisterInput, validate


@dataclass
class AuthResult:
    """An authenticated user and the token issued for them."""
    user: User
    token: str

    def to_dict(self) -> Dict[str, Any]:
        return {"token": self.token, "user": self.user.to_dict()}


class UserService(ServiceBase):
    """Accounts and authentication."""

    component = "user_service"

    def __init__(self, users: UserStore, hasher: PasswordHasher, tokens: TokenService):
        super().__init__()
        self.users = users
        self.hasher = hasher
        self.tokens = tokens

    async def register(self, payload: Mapping[str, Any]) -> Union[AuthResult, WorkflowError]:
        """
        Create an account and sign a token for it.

        Talent accounts keep ``location`` and ``skills``; admin accounts
        discard them.
        """
        data = validate(RegisterInput, payload)
        if is_error(data):
            return data

        try:
            if await self.users.get_by_email(data.email) is not None:
                return self._email_taken(data.email)

            user = build_user(
                data.role,
                name=data.name,
                email=data.email,
                password_hash=self.hasher.hash(data.password),
                location=data.location,
                skills=data.skills,
            )
            try:
                user = await self.users.create(user)
            except DuplicateKeyError:
                return self._email_taken(data.email)
        except Exception as e:
            return self.internal_error("register", e, email=data.email)

        self.logger.info("User registered", user_id=user.id, role=user.role.value)
        return AuthResult(user=user, token=self.tokens.issue(user))

    def _email_taken(self, email: str) -> ConflictError:
        self.logger.info("Registration rejected: email in use", email=email)
        return ConflictError("User with this email already exists", reason="EmailTaken")

    async def login(self, payload: Mapping[str, Any]) -> Union[AuthResult, WorkflowError]:
        data = validate(LoginInput, payload)
        if is_error(data):
            return data

        try:
            user = await self.users.get_by_email(data.email)
        except Exception as e:
            return self.internal_error("login", e, email=data.email)

        if user is None or not self.hasher.verify(data.password, user.password_hash):
            self.logger.info("Login failed", email=data.email)
            return UnauthorizedError("Invalid credentials")

        self.logger.info("User logged in", user_id=user.id)
        return AuthResult(user=user, token=self.tokens.issue(user))

    async def current_user(self, user_id: str) -> Union[User, WorkflowError]:
        try:
            user = await self.users.get(user_id)
        except Exception as e:
            return self.internal_error("current_user", e, user_id=user_id)
        if user is None:
            return NotFoundError("User not found", entity="User")
        return user

    async def list_users(self, role: Optional[Union[Role, str]] = None) -> Union[List[User], WorkflowError]:
        """All users, or only those with ``role``. Unknown roles are ignored."""
        try:
            role = Role(role) if role else None
        except ValueError:
            role = None
        try:
            return await self.users.list(role=role)
        except Exception as e:
            return self.internal_error("list_users", e, role=role)

    async def list_talents(self) -> Union[List[User], WorkflowError]:
        return await self.list_users(Role.TALENT)
