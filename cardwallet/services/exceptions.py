"""Exceptions raised by the identity/document-store adapters and the record codec."""

from typing import Optional


class CardWalletError(Exception):
    """Base exception for card wallet services."""


class RemoteServiceError(CardWalletError):
    """
    A call to the identity service or document store failed.
    transient=True for network errors, timeouts and server-side overload.
    """

    def __init__(self, message: str, *, transient: bool = False, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.transient = transient
        self.status_code = status_code


class RecordDecodeError(CardWalletError):
    """A stored record is missing a required field or has the wrong shape."""

    def __init__(self, field: str, reason: str = "missing or wrong type"):
        super().__init__(f"Malformed record: field '{field}' is {reason}")
        self.field = field
        self.reason = reason
