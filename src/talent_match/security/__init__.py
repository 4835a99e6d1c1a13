"""Password hashing and token issuance."""

from .passwords import PasswordHasher
from .tokens import TokenClaims, TokenService

__all__ = ["PasswordHasher", "TokenClaims", "TokenService"]
