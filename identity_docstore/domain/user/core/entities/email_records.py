"""Email side-index records.

Two secondary documents complement the user aggregate:

- ``UserEmailRecord``: email -> user key lookup
- ``UserEmailConfirmation``: existence means "email confirmed" for a
  (user name, email) pair

Both are keyed deterministically from normalized input, so repeated
lookups with equivalent input (case, surrounding whitespace) resolve to
the same document without a native secondary index.
"""

import hashlib
from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Optional

EMAIL_KEY_PREFIX = "user_emails/"
EMAIL_CONFIRMATION_KEY_PREFIX = "user_email_confirmations/"


def normalize(value: str) -> str:
    """Normalize user-supplied text for key derivation.

    Examples:
        >>> normalize("  Alice@Example.COM ")
        'alice@example.com'
    """
    return value.strip().lower()


def _digest(payload: str) -> str:
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def generate_email_key(email: str) -> str:
    """Derive the email index document key.

    Examples:
        >>> generate_email_key("A@B.io") == generate_email_key("a@b.io ")
        True
    """
    return EMAIL_KEY_PREFIX + _digest(normalize(email))


def generate_email_confirmation_key(user_name: str, email: str) -> str:
    """Derive the email confirmation document key.

    The user name is length-prefixed so that distinct pairs never
    concatenate to the same digest input.
    """
    name = normalize(user_name)
    return EMAIL_CONFIRMATION_KEY_PREFIX + _digest(f"{len(name)}:{name}|{normalize(email)}")


@dataclass
class UserEmailRecord:
    """Email lookup document pointing at the owning user."""

    COLLECTION_NAME: ClassVar[str] = "user_emails"

    email: str
    user_id: str
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.id is None:
            self.id = generate_email_key(self.email)


@dataclass
class UserEmailConfirmation:
    """Confirmation marker for a (user name, email) pair."""

    COLLECTION_NAME: ClassVar[str] = "user_email_confirmations"

    user_name: str
    email: str
    confirmed_on: Optional[datetime] = None
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.id is None:
            self.id = generate_email_confirmation_key(self.user_name, self.email)
