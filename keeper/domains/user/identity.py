"""Identity resolution for the three login flows.

Every flow returns an AuthResult instead of raising, so the caller has
to look at the verdict before deciding what to answer:

- Authenticated(user, created): the attempt proved who the caller is
- Rejected(reason): the attempt was refused
- StoreFailure(cause): the credential store (or a stored digest) failed
"""

import enum
import logging
from dataclasses import dataclass

from keeper.domains.user.errors import DuplicateAccount, MalformedCredentialRecord, StoreError
from keeper.domains.user.models import AuthProvider, User
from keeper.domains.user.repository import UserRepository
from keeper.domains.user.schemas import FederatedUserCreate, LocalUserCreate
from keeper.domains.user.security import PasswordHasher

logger = logging.getLogger(__name__)


class RejectReason(str, enum.Enum):
    """Why an attempt was refused."""

    DUPLICATE_ACCOUNT = "duplicate_account"
    INVALID_CREDENTIALS = "invalid_credentials"
    NOT_AUTHENTICATED = "not_authenticated"


@dataclass(frozen=True)
class Authenticated:
    user: User
    created: bool = False


@dataclass(frozen=True)
class Rejected:
    reason: RejectReason


@dataclass(frozen=True)
class StoreFailure:
    cause: StoreError | MalformedCredentialRecord


AuthResult = Authenticated | Rejected | StoreFailure


class IdentityResolver:
    """Decides whether a login attempt authenticates, creates or fails.

    Example:
        resolver = IdentityResolver(UserRepository(session), PasswordHasher())
        result = await resolver.login("user@example.com", "hunter22")
        if isinstance(result, Authenticated):
            ...
    """

    def __init__(self, repository: UserRepository, hasher: PasswordHasher) -> None:
        self._repo = repository
        self._hasher = hasher

    async def register(self, email: str, password: str) -> AuthResult:
        """Create a local user.

        The existence check only short-circuits the common case; the
        unique constraint on email decides races between concurrent
        registrations.
        """
        try:
            if await self._repo.find_by_email(email) is not None:
                return Rejected(RejectReason.DUPLICATE_ACCOUNT)
            digest = await self._hasher.hash_async(password)
            user = await self._repo.insert(LocalUserCreate(email=email, hashed_password=digest))
        except DuplicateAccount:
            return Rejected(RejectReason.DUPLICATE_ACCOUNT)
        except StoreError as e:
            return StoreFailure(e)

        logger.info("Registered local user %s", user.id)
        return Authenticated(user, created=True)

    async def login(self, email: str, password: str) -> AuthResult:
        """Verify a local email/password pair.

        Unknown email, provider-only account and wrong password all give
        the same INVALID_CREDENTIALS verdict, and all spend one bcrypt
        verification.
        """
        user: User | None = None
        try:
            user = await self._repo.find_by_email(email)
            if user is None or not user.hashed_password:
                await self._hasher.burn_verification_time(password)
                return Rejected(RejectReason.INVALID_CREDENTIALS)

            if not await self._hasher.verify_async(password, user.hashed_password):
                return Rejected(RejectReason.INVALID_CREDENTIALS)

            if self._hasher.needs_rehash(user.hashed_password):
                digest = await self._hasher.hash_async(password)
                await self._repo.update_password_hash(user.id, digest)
                logger.info("Upgraded password digest cost for user %s", user.id)
        except StoreError as e:
            return StoreFailure(e)
        except MalformedCredentialRecord as e:
            logger.error("Stored password digest for user %s is malformed", user.id if user else None)
            return StoreFailure(e)

        return Authenticated(user)

    async def federated_login(
        self,
        provider: AuthProvider,
        provider_id: str,
        profile_email: str | None = None,
    ) -> AuthResult:
        """Resolve a provider identity to a user, creating one if unseen.

        A new provider identity never takes over an existing account:
        when the profile email already belongs to another user the new
        row is created without an email.
        """
        try:
            user = await self._repo.find_by_provider_id(provider, provider_id)
            if user is not None:
                return Authenticated(user)

            email = profile_email
            if email and await self._repo.find_by_email(email) is not None:
                logger.info(
                    "Profile email already bound to another user; creating %s user without email",
                    provider.value,
                )
                email = None

            user, created = await self._repo.find_or_create_federated(
                FederatedUserCreate(provider=provider, provider_id=provider_id, email=email)
            )
        except StoreError as e:
            return StoreFailure(e)

        if created:
            logger.info("Created %s user %s", provider.value, user.id)
        return Authenticated(user, created=created)
