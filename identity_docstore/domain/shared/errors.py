"""
Domain exceptions.

Typed exceptions for caller mistakes and forbidden states.
Failures raised by the document store driver are NOT wrapped here:
they reach the caller unchanged.
"""

from __future__ import annotations

from typing import Optional


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all identity store errors.

    Allows catching every error raised by this package with a single
    except clause, while driver errors stay distinguishable.
    """

    pass


# ═══════════════════════════════════════════════════════════
# CALLER ERRORS
# ═══════════════════════════════════════════════════════════


class InvalidArgumentError(DomainError, ValueError):
    """
    A required argument is missing, empty or blank.

    Raised when:
    - user is None
    - login / claim / email is None
    - a lookup key is None, empty or whitespace

    Never retried: it is always a bug in the caller.

    Example:
        >>> raise InvalidArgumentError("user")
    """

    def __init__(self, param_name: str, message: Optional[str] = None):
        """Initialize with the offending parameter name.

        Args:
            param_name: Name of the invalid parameter
            message: Optional custom message
        """
        self.param_name = param_name
        super().__init__(message or f"Argument cannot be None: {param_name}")


class InvalidOperationError(DomainError, RuntimeError):
    """
    Operation attempted in a state that forbids it.

    Raised when:
    - email confirmation is read or written for a user without email
    - an untracked user is updated
    - the document key of an entity is reassigned
    - a closed session is used

    Example:
        >>> raise InvalidOperationError(
        ...     "Cannot get the confirmation status of the e-mail "
        ...     "because user doesn't have an e-mail."
        ... )
    """

    pass
