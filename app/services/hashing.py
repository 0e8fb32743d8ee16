"""Secret hashing for passwords and refresh tokens."""

import base64
import hashlib

import bcrypt

from app.config import get_settings


class SecretHasher:
    """Salted one-way hashing with bcrypt.

    Secrets are SHA-256 pre-hashed so values longer than bcrypt's 72-byte
    input limit (refresh tokens) are covered in full.
    """

    def __init__(self, rounds: int | None = None) -> None:
        self.rounds = rounds if rounds is not None else get_settings().BCRYPT_ROUNDS

    @staticmethod
    def _prepare(secret: str) -> bytes:
        return base64.b64encode(hashlib.sha256(secret.encode("utf-8")).digest())

    def hash(self, secret: str) -> str:
        """Hash a secret. Each call uses a fresh salt."""
        return bcrypt.hashpw(self._prepare(secret), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, secret: str, digest: str | None) -> bool:
        """Constant-time comparison. False for a missing or malformed digest."""
        if not digest:
            return False
        try:
            return bcrypt.checkpw(self._prepare(secret), digest.encode("utf-8"))
        except ValueError:
            return False


_hasher: SecretHasher | None = None


def get_hasher() -> SecretHasher:
    """Get singleton hasher instance."""
    global _hasher
    if _hasher is None:
        _hasher = SecretHasher()
    return _hasher
