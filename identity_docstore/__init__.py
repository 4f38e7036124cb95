"""Identity persistence on top of a document store.

Maps user-identity operations (logins, claims, password hash, security stamp,
two-factor flag, email and email confirmation) onto documents, with
deterministic side-index documents for email lookup and confirmation.
"""

__version__ = "0.3.0"
