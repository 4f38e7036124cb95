"""User store capability ports (interfaces).

Each capability is an independent interface; a single backing
implementation may satisfy any combination of them.
"""

from abc import ABC, abstractmethod
from typing import Generic, List, Optional, TypeVar

from identity_docstore.domain.shared.document_query import DocumentQuery
from identity_docstore.domain.user.core.entities.user import IdentityUser
from identity_docstore.domain.user.core.value_objects.claim import Claim
from identity_docstore.domain.user.core.value_objects.user_login_info import UserLoginInfo

TUser = TypeVar("TUser", bound=IdentityUser)


class IUserStore(ABC, Generic[TUser]):
    """Account lifecycle interface for the user aggregate.

    Defines contract for user persistence operations.

    Examples:
        >>> user = IdentityUser(user_name="alice")
        >>> await store.create(user)
        >>> found = await store.find_by_id(user.id)
    """

    @abstractmethod
    async def create(self, user: TUser) -> None:
        """Persist a new user and commit.

        Args:
            user: User to create

        Raises:
            InvalidArgumentError: If user or its user_name is None

        Note:
            No user name or email uniqueness is enforced.
        """
        pass

    @abstractmethod
    async def update(self, user: TUser) -> None:
        """Commit pending changes of a tracked user.

        Args:
            user: User previously created or loaded through this store

        Raises:
            InvalidArgumentError: If user is None
            InvalidOperationError: If user is not tracked by the session
        """
        pass

    @abstractmethod
    async def delete(self, user: TUser) -> None:
        """Delete user and commit.

        Email index and confirmation records are left in place.

        Raises:
            InvalidArgumentError: If user is None
        """
        pass

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[TUser]:
        """Find user by document key.

        Returns:
            User if found, None otherwise

        Raises:
            InvalidArgumentError: If user_id is None, empty or whitespace
        """
        pass

    @abstractmethod
    async def find_by_name(self, user_name: str) -> Optional[TUser]:
        """Find user by exact (case-sensitive) user name.

        Returns:
            User if found, None otherwise

        Raises:
            InvalidArgumentError: If user_name is None, empty or whitespace
        """
        pass


class IQueryableUserStore(ABC, Generic[TUser]):
    """Query access to the users collection."""

    @abstractmethod
    async def users(
        self, where: Optional[DocumentQuery] = None, limit: Optional[int] = None
    ) -> List[TUser]:
        """List persisted users matching ``where`` (all users when None)."""
        pass


class IUserLoginStore(ABC, Generic[TUser]):
    """External login association.

    Mutators change the in-memory user only; call ``update`` to persist.
    """

    @abstractmethod
    async def get_logins(self, user: TUser) -> List[UserLoginInfo]:
        pass

    @abstractmethod
    async def find_by_login(self, login: UserLoginInfo) -> Optional[TUser]:
        """Find the first persisted user holding the login."""
        pass

    @abstractmethod
    async def add_login(self, user: TUser, login: UserLoginInfo) -> None:
        pass

    @abstractmethod
    async def remove_login(self, user: TUser, login: UserLoginInfo) -> None:
        pass


class IUserClaimStore(ABC, Generic[TUser]):
    """Claim association. Same in-memory semantics as logins."""

    @abstractmethod
    async def get_claims(self, user: TUser) -> List[Claim]:
        pass

    @abstractmethod
    async def add_claim(self, user: TUser, claim: Claim) -> None:
        pass

    @abstractmethod
    async def remove_claim(self, user: TUser, claim: Claim) -> None:
        pass


class IUserPasswordStore(ABC, Generic[TUser]):
    """Password hash storage (hashing is the caller's job)."""

    @abstractmethod
    async def get_password_hash(self, user: TUser) -> Optional[str]:
        pass

    @abstractmethod
    async def has_password(self, user: TUser) -> bool:
        pass

    @abstractmethod
    async def set_password_hash(self, user: TUser, password_hash: Optional[str]) -> None:
        pass


class IUserSecurityStampStore(ABC, Generic[TUser]):
    @abstractmethod
    async def get_security_stamp(self, user: TUser) -> Optional[str]:
        pass

    @abstractmethod
    async def set_security_stamp(self, user: TUser, stamp: Optional[str]) -> None:
        pass


class IUserTwoFactorStore(ABC, Generic[TUser]):
    @abstractmethod
    async def get_two_factor_enabled(self, user: TUser) -> bool:
        pass

    @abstractmethod
    async def set_two_factor_enabled(self, user: TUser, enabled: bool) -> None:
        pass


class IUserEmailStore(ABC, Generic[TUser]):
    """Email and email confirmation management.

    Confirmation state is keyed by (user name, email): changing either
    field reads as unconfirmed until confirmed again.
    """

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[TUser]:
        """Find user through the email index record.

        Returns:
            User if an index record exists and its user is found, None otherwise
        """
        pass

    @abstractmethod
    async def get_email(self, user: TUser) -> Optional[str]:
        pass

    @abstractmethod
    async def set_email(self, user: TUser, email: str) -> None:
        """Set email, store its index record and commit.

        Raises:
            InvalidArgumentError: If user or email is None
            InvalidOperationError: If user has no id yet
        """
        pass

    @abstractmethod
    async def get_email_confirmed(self, user: TUser) -> bool:
        """Raises InvalidOperationError when the user has no email."""
        pass

    @abstractmethod
    async def set_email_confirmed(self, user: TUser, confirmed: bool) -> None:
        """Create or delete the confirmation record and commit.

        Raises:
            InvalidOperationError: If user has no email
        """
        pass
