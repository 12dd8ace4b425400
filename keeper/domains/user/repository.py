"""Repository for User domain.

This module provides data access operations for the User model
following the Repository pattern with async SQLAlchemy.

Uniqueness of email and provider ids is enforced by the database; the
repository translates a constraint violation into DuplicateAccount and
any other storage fault into StoreError.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from keeper.domains.shared.repository import GenericRepository
from keeper.domains.user.errors import DuplicateAccount, StoreError
from keeper.domains.user.models import AuthProvider, User
from keeper.domains.user.schemas import FederatedUserCreate, LocalUserCreate, normalize_email

logger = logging.getLogger(__name__)

# Columns carrying a unique constraint, in the order they are reported
_UNIQUE_FIELDS = ("google_id", "facebook_id", "email")


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Wrap storage and connectivity faults into StoreError."""
    try:
        yield
    except (SQLAlchemyError, OSError) as e:
        logger.error("Credential store failure during %s: %s", operation, type(e).__name__)
        raise StoreError(f"Credential store failure during {operation}") from e


def _violated_field(error: IntegrityError) -> str:
    message = str(error.orig).lower()
    for field in _UNIQUE_FIELDS:
        if field in message:
            return field
    return "email"


class UserRepository(GenericRepository[User, LocalUserCreate]):
    """Repository for User persistence.

    Extends the generic repository with user-specific queries
    such as finding by email or provider identifier.

    Example:
        repo = UserRepository(session)
        user = await repo.find_by_email("user@example.com")
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a database session."""
        super().__init__(User, session)

    async def find_by_email(self, email: str) -> User | None:
        """Find a user by their email address.

        Args:
            email: The email address to search for (any case)

        Returns:
            The User if found, None otherwise
        """
        email = normalize_email(email)
        if email is None:
            return None
        with store_errors("find_by_email"):
            return await self.find_one(User.email == email)

    async def find_by_provider_id(
        self,
        provider: AuthProvider,
        provider_id: str,
    ) -> User | None:
        """Find a user by their federated login identifier.

        Args:
            provider: The identity provider
            provider_id: The unique ID from the provider

        Returns:
            The User if found, None otherwise
        """
        column = getattr(User, provider.id_column)
        with store_errors("find_by_provider_id"):
            return await self.find_one(column == provider_id)

    async def find_by_id(self, user_id: UUID) -> User | None:
        """Rehydrate a user by primary key."""
        with store_errors("find_by_id"):
            return await self.get_by_id(user_id)

    async def insert(self, data: LocalUserCreate | FederatedUserCreate) -> User:
        """Insert and commit a new user.

        Args:
            data: Creation data for a local or federated user

        Returns:
            The newly created User

        Raises:
            DuplicateAccount: If a unique column is already taken
            StoreError: On any other storage fault
        """
        with store_errors("insert"):
            try:
                user = await self.create(data.to_row())
                await self.commit()
            except IntegrityError as e:
                await self.rollback()
                field = _violated_field(e)
                logger.info("Insert rejected, %s already taken", field)
                raise DuplicateAccount(field) from e
        return user

    async def find_or_create_federated(
        self,
        data: FederatedUserCreate,
    ) -> tuple[User, bool]:
        """Find the user for a provider identity or create it.

        A concurrent request may create the same provider identity, or
        claim the profile email, between the lookup and the insert. The
        first case resolves to the winning row; the second retries once
        without the email.

        Args:
            data: Federated user data

        Returns:
            Tuple of (User, created) where created is True if new

        Raises:
            StoreError: If the conflict cannot be resolved
        """
        existing = await self.find_by_provider_id(data.provider, data.provider_id)
        if existing:
            return existing, False

        attempts = [data]
        if data.email is not None:
            attempts.append(data.model_copy(update={"email": None}))

        for attempt in attempts:
            try:
                return await self.insert(attempt), True
            except DuplicateAccount as e:
                winner = await self.find_by_provider_id(data.provider, data.provider_id)
                if winner is not None:
                    return winner, False
                if e.field != "email":
                    break

        raise StoreError(f"Could not create {data.provider.value} user")

    async def update_password_hash(self, user_id: UUID, hashed_password: str) -> User | None:
        """Replace a user's stored digest and commit."""
        with store_errors("update_password_hash"):
            user = await self.update(user_id, {"hashed_password": hashed_password})
            await self.commit()
        return user

    async def update_secret(self, user_id: UUID, text: str) -> User | None:
        """Store a user's secret and commit.

        Args:
            user_id: The user's ID
            text: The secret text

        Returns:
            The updated User if found, None otherwise
        """
        with store_errors("update_secret"):
            user = await self.update(user_id, {"secret": text})
            await self.commit()
        return user

    async def list_secrets(self, limit: int = 100) -> list[str]:
        """All submitted secrets, newest first, without owner information."""
        stmt = (
            select(User.secret)
            .where(User.secret.is_not(None))
            .order_by(User.updated_at.desc())
            .limit(limit)
        )
        with store_errors("list_secrets"):
            result = await self._session.execute(stmt)
            return list(result.scalars().all())
