"""Error taxonomy of the import pipeline."""

from __future__ import annotations


class UserImportError(RuntimeError):
    """Base class for all import failures."""


class AuthenticationError(UserImportError):
    """Raised when no session token could be obtained. Aborts the run."""


class InputError(UserImportError):
    """Raised when the input records cannot be read or validated. Aborts the run."""


class RemoteCallError(UserImportError):
    """Raised when a call to the remote service does not succeed."""

    def __init__(
        self,
        operation: str,
        *,
        status_code: int | None = None,
        detail: str | None = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        self.detail = detail
        status = f"HTTP {status_code}" if status_code is not None else "transport error"
        message = f"{operation} failed ({status})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class RemotePayloadError(RemoteCallError):
    """Raised when a successful response carries a body that cannot be parsed."""


class BatchReconciliationError(UserImportError):
    """Raised when a batch cannot be matched against the remote service."""
