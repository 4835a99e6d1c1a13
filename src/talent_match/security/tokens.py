"""JWT issuance and verification."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

import jwt

from talent_match.core.errors import UnauthorizedError
from talent_match.core.ids import is_valid_id
from talent_match.core.models import Role, User
from talent_match.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a verified token."""
    id: str
    role: Role
    email: Optional[str] = None
    name: Optional[str] = None


class TokenService:
    """Issues and verifies signed tokens carrying ``{id, role}``."""

    _ERROR_MESSAGES = {
        jwt.ExpiredSignatureError: "Token has expired",
        jwt.ImmatureSignatureError: "Token is not active yet",
        jwt.DecodeError: "Invalid token format",
    }

    def __init__(self, secret_key: str, algorithm: str = "HS256", expiration_hours: int = 168):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expiration = timedelta(hours=expiration_hours)
        self.logger = logger.bind(component="token_service")

    def issue(self, user: User, now: Optional[datetime] = None) -> str:
        """Sign a token for a user."""
        issued_at = now or datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "id": user.id,
            "role": user.role.value,
            "email": user.email,
            "name": user.name,
            "iat": issued_at,
            "exp": issued_at + self.expiration,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Union[TokenClaims, UnauthorizedError]:
        """Decode a token, returning its claims or an ``UnauthorizedError``."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.InvalidTokenError as e:
            message = next(
                (msg for exc_type, msg in self._ERROR_MESSAGES.items() if isinstance(e, exc_type)),
                "Not authorized to access this route",
            )
            self.logger.info("Token rejected", reason=message, error_type=type(e).__name__)
            return UnauthorizedError(message)

        if not payload.get("id"):
            return UnauthorizedError("Invalid Token: Missing required fields in token payload")
        if not is_valid_id(payload["id"]):
            return UnauthorizedError("Invalid user ID in token")
        try:
            role = Role(payload.get("role"))
        except ValueError:
            return UnauthorizedError("Invalid Token: Unknown role")

        return TokenClaims(
            id=payload["id"],
            role=role,
            email=payload.get("email"),
            name=payload.get("name"),
        )
