"""PBKDF2 password hashing."""

import hashlib
import hmac
import os

_ALGORITHM = "pbkdf2_sha256"
_SALT_LEN = 16


class PasswordHasher:
    """Hashes passwords as ``pbkdf2_sha256$<iterations>$<salt>$<digest>``."""

    def __init__(self, iterations: int = 260_000):
        self.iterations = iterations

    def _derive(self, password: str, salt: bytes, iterations: int) -> bytes:
        return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)

    def hash(self, password: str) -> str:
        salt = os.urandom(_SALT_LEN)
        digest = self._derive(password, salt, self.iterations)
        return f"{_ALGORITHM}${self.iterations}${salt.hex()}${digest.hex()}"

    def verify(self, password: str, encoded: str) -> bool:
        """Check a password against a stored hash. Malformed hashes never verify."""
        try:
            algorithm, iterations, salt_hex, digest_hex = encoded.split("$")
            if algorithm != _ALGORITHM:
                return False
            expected = bytes.fromhex(digest_hex)
            actual = self._derive(password, bytes.fromhex(salt_hex), int(iterations))
        except ValueError:
            return False
        return hmac.compare_digest(expected, actual)
