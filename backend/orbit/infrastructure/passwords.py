"""Password Hashing — bcrypt behind the PasswordHasher protocol.

Invariants:
    - Only bcrypt hashes are returned; plaintext passwords are never stored
    - verify() returns False for a malformed stored hash instead of raising
    - Hashing runs in a worker thread: the event loop never blocks on bcrypt

Design Decisions:
    - verify_unknown() reuses one lazily built dummy hash per hasher instance
    - Cost factor from settings (default 10): tests drop to the bcrypt
      minimum of 4 through BCRYPT_ROUNDS
    - Passwords encoded as UTF-8; bcrypt only reads the first 72 bytes
"""

import asyncio

import bcrypt

BCRYPT_MAX_BYTES = 72
_DUMMY_PASSWORD = "orbit-timing-equalizer"


class BcryptPasswordHasher:
    def __init__(self, rounds: int = 10):
        self._rounds = rounds
        self._dummy_hash: str | None = None

    async def hash(self, plain_password: str) -> str:
        return await asyncio.to_thread(self._hash_sync, plain_password)

    async def verify(self, plain_password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(
            self._verify_sync, plain_password, password_hash,
        )

    async def verify_unknown(self, plain_password: str) -> bool:
        if self._dummy_hash is None:
            self._dummy_hash = await self.hash(_DUMMY_PASSWORD)
        await self.verify(plain_password, self._dummy_hash)
        return False

    def _hash_sync(self, plain_password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_encode(plain_password), salt).decode("ascii")

    @staticmethod
    def _verify_sync(plain_password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(
                _encode(plain_password), password_hash.encode("ascii"),
            )
        except (ValueError, UnicodeEncodeError):
            return False


def _encode(plain_password: str) -> bytes:
    return plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
