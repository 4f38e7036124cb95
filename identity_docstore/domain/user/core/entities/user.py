"""IdentityUser entity - aggregate root."""

from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Optional

from identity_docstore.domain.shared.errors import InvalidOperationError
from identity_docstore.domain.user.core.value_objects.claim import Claim
from identity_docstore.domain.user.core.value_objects.user_login_info import UserLoginInfo


@dataclass
class UserLogin:
    """External login bound to a user (stored inside the user document)."""

    login_provider: str
    provider_key: str

    @staticmethod
    def from_login_info(login: UserLoginInfo) -> "UserLogin":
        return UserLogin(login_provider=login.login_provider, provider_key=login.provider_key)

    def to_login_info(self) -> UserLoginInfo:
        return UserLoginInfo(login_provider=self.login_provider, provider_key=self.provider_key)

    def matches(self, login: UserLoginInfo) -> bool:
        return (
            self.login_provider == login.login_provider and self.provider_key == login.provider_key
        )


@dataclass
class UserClaim:
    """Claim held by a user (stored inside the user document)."""

    claim_type: str
    claim_value: str

    @staticmethod
    def from_claim(claim: Claim) -> "UserClaim":
        return UserClaim(claim_type=claim.type, claim_value=claim.value)

    def to_claim(self) -> Claim:
        return Claim(type=self.claim_type, value=self.claim_value)

    def matches(self, claim: Claim) -> bool:
        return self.claim_type == claim.type and self.claim_value == claim.value


@dataclass(eq=False)
class IdentityUser:
    """User aggregate root.

    One document per user in the ``users`` collection. Logins and claims
    are embedded; email lookup and email confirmation live in separate
    index documents (see ``email_records``).

    Invariants:
    - id is assigned once (by the caller or at first store) and never changes
    - logins / claims keep insertion order and may contain duplicates

    Subclasses may declare extra dataclass fields; they are persisted
    and restored like the base fields.

    Examples:
        >>> user = IdentityUser(user_name="alice")
        >>> user.id is None
        True
        >>> user.id = "users/1"
        >>> user.id = "users/1"  # same value is accepted
        >>> user.logins
        []
    """

    COLLECTION_NAME: ClassVar[str] = "users"

    user_name: str
    id: Optional[str] = None
    email: Optional[str] = None
    password_hash: Optional[str] = None
    security_stamp: Optional[str] = None
    is_two_factor_enabled: bool = False
    logins: List[UserLogin] = field(default_factory=list)
    claims: List[UserClaim] = field(default_factory=list)

    def __setattr__(self, name: str, value: Any) -> None:
        """Guard id immutability."""
        if name == "id":
            current = getattr(self, "id", None)
            if current is not None and value != current:
                raise InvalidOperationError(
                    f"User id is immutable once assigned: {current!r} -> {value!r}"
                )
        super().__setattr__(name, value)

    def __eq__(self, other: object) -> bool:
        """Equality based on id (aggregate identity)."""
        if not isinstance(other, IdentityUser):
            return False
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on id (aggregate identity), object identity while unassigned.

        Do not keep an unsaved user in a set or dict key across id assignment.
        """
        if self.id is None:
            return id(self)
        return hash(self.id)
