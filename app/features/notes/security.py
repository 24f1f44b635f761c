"""Password hashing and verification"""

import asyncio
import logging

import bcrypt

from app.config import BCRYPT_ROUNDS, PASSWORD_FAILURE_DELAY_SECONDS

logger = logging.getLogger(__name__)

BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordGuard:
    """
    One-way bcrypt hashing of note passwords.

    The hash embeds its own salt and cost, so verification needs nothing but
    the stored string. Hashing and checking run in a worker thread because
    bcrypt is deliberately CPU-bound.
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS, failure_delay: float = PASSWORD_FAILURE_DELAY_SECONDS):
        self.rounds = rounds
        self.failure_delay = failure_delay

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hash_sync, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        """
        Constant-time check of ``password`` against ``password_hash``.

        A malformed hash counts as a mismatch. Every mismatch waits
        ``failure_delay`` seconds before returning.
        """
        try:
            valid = await asyncio.to_thread(self._check_sync, password, password_hash)
        except ValueError:
            logger.warning("Password verification failed on a malformed hash")
            valid = False

        if not valid and self.failure_delay > 0:
            await asyncio.sleep(self.failure_delay)

        return valid

    def _hash_sync(self, password: str) -> str:
        return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    @staticmethod
    def _check_sync(password: str, password_hash: str) -> bool:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))


def _encode(password: str) -> bytes:
    # bcrypt only reads the first 72 bytes
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]
