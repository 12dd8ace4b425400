"""Password hashing utilities using bcrypt.

This module provides secure password hashing and verification
using the bcrypt algorithm directly.
"""

import asyncio
import re
from functools import cached_property

import bcrypt

from keeper.domains.user.errors import MalformedCredentialRecord

# bcrypt operates on at most 72 bytes of input
BCRYPT_MAX_BYTES = 72

# $2b$12$ + 22 chars of salt + 31 chars of hash
_BCRYPT_DIGEST = re.compile(r"^\$2[abxy]?\$(?P<cost>\d{2})\$[./A-Za-z0-9]{53}$")


class PasswordHasher:
    """Handles password hashing and verification using bcrypt.

    The digest is self-contained: algorithm version, cost and salt are
    encoded in it, so verification needs nothing but the digest.

    Example:
        hasher = PasswordHasher(rounds=12)
        hashed = hasher.hash("my_secure_password")
        is_valid = hasher.verify("my_secure_password", hashed)
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    @staticmethod
    def _truncate_password(password: str) -> bytes:
        """Truncate password to 72 bytes (bcrypt limit).

        Args:
            password: The plain text password

        Returns:
            Password encoded as bytes, truncated to 72 bytes
        """
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES]

    @staticmethod
    def _parse(hashed_password: str | None) -> bytes:
        if not hashed_password or not _BCRYPT_DIGEST.match(hashed_password):
            raise MalformedCredentialRecord("Stored password digest is not a bcrypt digest")
        return hashed_password.encode("ascii")

    def hash(self, password: str) -> str:
        """Hash a plain text password.

        Args:
            password: The plain text password to hash

        Returns:
            The bcrypt hashed password string

        Raises:
            ValueError: If the password is empty
        """
        if not password:
            raise ValueError("Password must not be empty")
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(self._truncate_password(password), salt).decode("ascii")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a plain text password against a hash.

        Args:
            plain_password: The plain text password to verify
            hashed_password: The bcrypt hash to verify against

        Returns:
            True if the password matches, False otherwise

        Raises:
            MalformedCredentialRecord: If the stored digest is corrupted
        """
        digest = self._parse(hashed_password)
        try:
            return bcrypt.checkpw(self._truncate_password(plain_password or ""), digest)
        except ValueError as e:
            # bcrypt rejects a digest whose salt it cannot decode
            raise MalformedCredentialRecord(str(e)) from e

    def needs_rehash(self, hashed_password: str) -> bool:
        """Check whether a digest was made with a lower cost than configured.

        Args:
            hashed_password: The existing hash to check

        Returns:
            True if the hash should be regenerated
        """
        match = _BCRYPT_DIGEST.match(hashed_password or "")
        if match is None:
            raise MalformedCredentialRecord("Stored password digest is not a bcrypt digest")
        return int(match.group("cost")) < self.rounds

    @cached_property
    def dummy_digest(self) -> str:
        """A digest of a random value, used to spend verification time
        when there is no stored digest to check against."""
        return self.hash(bcrypt.gensalt().decode("ascii"))

    async def hash_async(self, password: str) -> str:
        """Hash in a worker thread so the event loop stays responsive."""
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, plain_password: str, hashed_password: str) -> bool:
        """Verify in a worker thread so the event loop stays responsive."""
        return await asyncio.to_thread(self.verify, plain_password, hashed_password)

    async def burn_verification_time(self, plain_password: str) -> None:
        """Run a verification whose result is discarded."""
        await asyncio.to_thread(self._burn, plain_password)

    def _burn(self, plain_password: str) -> None:
        # first use also builds dummy_digest, so this must stay off the loop
        self.verify(plain_password, self.dummy_digest)
