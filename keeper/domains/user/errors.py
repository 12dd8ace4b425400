"""Domain errors raised by the credential store and password hasher.

These are transport-agnostic; the auth service translates them into
HTTP exceptions from ``keeper.core.exceptions``.
"""


class KeeperError(Exception):
    """Base class for domain errors."""


class DuplicateAccount(KeeperError):
    """An email or provider id is already bound to another user."""

    def __init__(self, field: str = "email") -> None:
        self.field = field
        super().__init__(f"A user with this {field} already exists")


class StoreError(KeeperError):
    """The credential store failed. The original fault is ``__cause__``."""


class MalformedCredentialRecord(KeeperError):
    """A stored password digest is not a valid bcrypt string."""
