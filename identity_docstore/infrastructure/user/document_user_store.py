"""Document-backed user store.

One implementation of every user store capability, on top of a single
document session (unit of work).

Write timing:
- create / update / delete / set_email / set_email_confirmed commit
  the session immediately
- every other mutator (logins, claims, password hash, security stamp,
  two-factor flag) only changes the in-memory user; call ``update``
  to persist it
"""

from datetime import datetime, timezone
from typing import Any, Generic, List, Optional, Type

import structlog

from identity_docstore.domain.shared.document_query import (
    DocumentQuery,
    ElementMatches,
    FieldEquals,
)
from identity_docstore.domain.shared.errors import InvalidArgumentError, InvalidOperationError
from identity_docstore.domain.shared.ports.document_session import IDocumentSession, Include
from identity_docstore.domain.user.core.entities.email_records import (
    UserEmailConfirmation,
    UserEmailRecord,
    generate_email_confirmation_key,
    generate_email_key,
)
from identity_docstore.domain.user.core.entities.user import IdentityUser, UserClaim, UserLogin
from identity_docstore.domain.user.core.ports.user_stores import (
    IQueryableUserStore,
    IUserClaimStore,
    IUserEmailStore,
    IUserLoginStore,
    IUserPasswordStore,
    IUserSecurityStampStore,
    IUserStore,
    IUserTwoFactorStore,
    TUser,
)
from identity_docstore.domain.user.core.value_objects.claim import Claim
from identity_docstore.domain.user.core.value_objects.user_login_info import UserLoginInfo

logger = structlog.get_logger(__name__)


def _require(value: Any, param_name: str) -> None:
    if value is None:
        raise InvalidArgumentError(param_name)


def _require_text(value: Optional[str], param_name: str) -> None:
    if value is None or not value.strip():
        raise InvalidArgumentError(
            param_name, f"Input cannot be None, empty or white space: {param_name}"
        )


class DocumentUserStore(
    IUserStore[TUser],
    IQueryableUserStore[TUser],
    IUserLoginStore[TUser],
    IUserClaimStore[TUser],
    IUserPasswordStore[TUser],
    IUserSecurityStampStore[TUser],
    IUserTwoFactorStore[TUser],
    IUserEmailStore[TUser],
    Generic[TUser],
):
    """User store over a document session.

    Not safe for concurrent use: one store (and session) per request.

    Examples:
        >>> store = DocumentUserStore(document_store.open_session())
        >>> user = IdentityUser(user_name="alice")
        >>> await store.create(user)
        >>> await store.add_login(user, UserLoginInfo(login_provider="github", provider_key="42"))
        >>> await store.update(user)  # logins are persisted here
        >>> await store.set_email(user, "alice@example.com")
        >>> (await store.find_by_email("ALICE@example.com")).id == user.id
        True
    """

    def __init__(
        self,
        session: IDocumentSession,
        user_type: Type[TUser] = IdentityUser,  # type: ignore[assignment]
        dispose_session: bool = True,
    ) -> None:
        """Initialize store.

        Args:
            session: Document session used for every operation
            user_type: User aggregate class (IdentityUser or subclass)
            dispose_session: Close the session when the store is closed
        """
        _require(session, "session")
        self._session = session
        self._user_type = user_type
        self._dispose_session = dispose_session

    @property
    def session(self) -> IDocumentSession:
        return self._session

    async def close(self) -> None:
        if self._dispose_session:
            await self._session.close()

    async def __aenter__(self) -> "DocumentUserStore[TUser]":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ============================================================
    # IUserStore
    # ============================================================

    async def create(self, user: TUser) -> None:
        """Store and commit. Uniqueness is left to the caller."""
        _require(user, "user")
        _require(user.user_name, "user_name")

        await self._session.store(user)
        await self._session.save_changes()
        logger.info("user.created", user_id=user.id)

    async def find_by_id(self, user_id: str) -> Optional[TUser]:
        _require_text(user_id, "user_id")
        return await self._session.load(self._user_type, user_id)

    async def find_by_name(self, user_name: str) -> Optional[TUser]:
        _require_text(user_name, "user_name")
        users = await self._session.query(
            self._user_type, FieldEquals("user_name", user_name), limit=1
        )
        return users[0] if users else None

    async def update(self, user: TUser) -> None:
        """Commit pending changes; the user must be tracked by the session."""
        _require(user, "user")
        if not self._session.is_tracked(user):
            raise InvalidOperationError(
                f"User {user.id!r} is not tracked by this session; "
                "create or load it through the same store before updating"
            )

        await self._session.save_changes()
        logger.debug("user.updated", user_id=user.id)

    async def delete(self, user: TUser) -> None:
        _require(user, "user")

        self._session.delete(user)
        await self._session.save_changes()
        logger.info("user.deleted", user_id=user.id)

    # ============================================================
    # IQueryableUserStore
    # ============================================================

    async def users(
        self, where: Optional[DocumentQuery] = None, limit: Optional[int] = None
    ) -> List[TUser]:
        return await self._session.query(self._user_type, where, limit)

    # ============================================================
    # IUserLoginStore
    # ============================================================

    async def get_logins(self, user: TUser) -> List[UserLoginInfo]:
        _require(user, "user")
        return [login.to_login_info() for login in user.logins]

    async def find_by_login(self, login: UserLoginInfo) -> Optional[TUser]:
        _require(login, "login")
        users = await self._session.query(
            self._user_type,
            ElementMatches(
                "logins",
                {"login_provider": login.login_provider, "provider_key": login.provider_key},
            ),
            limit=1,
        )
        return users[0] if users else None

    async def add_login(self, user: TUser, login: UserLoginInfo) -> None:
        _require(user, "user")
        _require(login, "login")
        user.logins.append(UserLogin.from_login_info(login))

    async def remove_login(self, user: TUser, login: UserLoginInfo) -> None:
        _require(user, "user")
        _require(login, "login")
        for index, user_login in enumerate(user.logins):
            if user_login.matches(login):
                del user.logins[index]
                break

    # ============================================================
    # IUserClaimStore
    # ============================================================

    async def get_claims(self, user: TUser) -> List[Claim]:
        _require(user, "user")
        return [claim.to_claim() for claim in user.claims]

    async def add_claim(self, user: TUser, claim: Claim) -> None:
        _require(user, "user")
        _require(claim, "claim")
        user.claims.append(UserClaim.from_claim(claim))

    async def remove_claim(self, user: TUser, claim: Claim) -> None:
        _require(user, "user")
        _require(claim, "claim")
        for index, user_claim in enumerate(user.claims):
            if user_claim.matches(claim):
                del user.claims[index]
                break

    # ============================================================
    # IUserPasswordStore / IUserSecurityStampStore / IUserTwoFactorStore
    # ============================================================

    async def get_password_hash(self, user: TUser) -> Optional[str]:
        _require(user, "user")
        return user.password_hash

    async def has_password(self, user: TUser) -> bool:
        _require(user, "user")
        return user.password_hash is not None

    async def set_password_hash(self, user: TUser, password_hash: Optional[str]) -> None:
        _require(user, "user")
        user.password_hash = password_hash

    async def get_security_stamp(self, user: TUser) -> Optional[str]:
        _require(user, "user")
        return user.security_stamp

    async def set_security_stamp(self, user: TUser, stamp: Optional[str]) -> None:
        _require(user, "user")
        user.security_stamp = stamp

    async def get_two_factor_enabled(self, user: TUser) -> bool:
        _require(user, "user")
        return user.is_two_factor_enabled

    async def set_two_factor_enabled(self, user: TUser, enabled: bool) -> None:
        _require(user, "user")
        user.is_two_factor_enabled = enabled

    # ============================================================
    # IUserEmailStore
    # ============================================================

    async def find_by_email(self, email: str) -> Optional[TUser]:
        """Resolve user through the email index record.

        The index record and its user are fetched in one round trip;
        the second load is served from the identity map.
        """
        _require_text(email, "email")

        record = await self._session.load(
            UserEmailRecord,
            generate_email_key(email),
            include=Include("user_id", self._user_type),
        )
        if record is None:
            return None

        return await self._session.load(self._user_type, record.user_id)

    async def get_email(self, user: TUser) -> Optional[str]:
        _require(user, "user")
        return user.email

    async def set_email(self, user: TUser, email: str) -> None:
        """Set email and store its index record, then commit.

        The index record of a previous email is kept: it still
        resolves to this user.
        """
        _require(user, "user")
        _require(email, "email")
        if user.id is None:
            raise InvalidOperationError(
                "Cannot set the e-mail because user doesn't have an id. Create the user first."
            )

        user.email = email

        record = self._session.get_tracked(UserEmailRecord, generate_email_key(email))
        if record is not None:
            record.email = email
            record.user_id = user.id
        else:
            await self._session.store(UserEmailRecord(email=email, user_id=user.id))

        await self._session.save_changes()
        logger.info("user.email_set", user_id=user.id)

    async def get_email_confirmed(self, user: TUser) -> bool:
        _require(user, "user")
        self._require_confirmation_key(user, "get")

        confirmation = await self._get_email_confirmation(user.user_name, user.email)
        return confirmation is not None

    async def set_email_confirmed(self, user: TUser, confirmed: bool) -> None:
        _require(user, "user")
        self._require_confirmation_key(user, "set")

        if confirmed:
            confirmed_on = datetime.now(timezone.utc)
            key = generate_email_confirmation_key(user.user_name, user.email)
            confirmation = self._session.get_tracked(UserEmailConfirmation, key)
            if confirmation is not None:
                confirmation.confirmed_on = confirmed_on
            else:
                await self._session.store(
                    UserEmailConfirmation(
                        user_name=user.user_name, email=user.email, confirmed_on=confirmed_on
                    )
                )
        else:
            confirmation = await self._get_email_confirmation(user.user_name, user.email)
            if confirmation is not None:
                self._session.delete(confirmation)

        await self._session.save_changes()
        logger.info("user.email_confirmation_set", user_id=user.id, confirmed=confirmed)

    @staticmethod
    def _require_confirmation_key(user: IdentityUser, action: str) -> None:
        if user.email is None:
            raise InvalidOperationError(
                f"Cannot {action} the confirmation status of the e-mail "
                "because user doesn't have an e-mail."
            )
        if user.user_name is None:
            raise InvalidOperationError(
                f"Cannot {action} the confirmation status of the e-mail "
                "because user doesn't have a user name."
            )

    async def _get_email_confirmation(
        self, user_name: str, email: str
    ) -> Optional[UserEmailConfirmation]:
        return await self._session.load(
            UserEmailConfirmation, generate_email_confirmation_key(user_name, email)
        )
