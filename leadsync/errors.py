"""
Failure taxonomy for the lead pipeline.

Every failure reaches the caller classified well enough to pick a
transport status, but nothing here knows about HTTP. "Not found" is not
an error: repositories return ``None`` for tolerated absence.
"""

from typing import Optional


class LeadSyncError(Exception):
    """Root of all errors raised by the pipeline."""


class InvalidIdentity(LeadSyncError):
    """Raised when a raw phone normalizes to an empty identity key."""

    def __init__(self, raw_phone: object) -> None:
        self.raw_phone = raw_phone
        super().__init__(
            f"Invalid phone number {raw_phone!r}: empty after normalization"
        )


class StoreFailure(LeadSyncError):
    """Raised when a store operation fails for a reason other than absence."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        message = f"Store operation '{operation}' failed"
        super().__init__(f"{message}: {detail}" if detail else message)


class BackendError(LeadSyncError):
    """Generation backend failure not covered by a more specific class."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class BackendAuthError(BackendError):
    """The backend rejected our credentials."""


class BackendRateLimited(BackendError):
    """The backend throttled the request."""


class BackendUnavailable(BackendError):
    """The backend failed server-side, timed out, or could not be reached."""
