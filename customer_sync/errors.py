"""Error taxonomy for sync runs."""

from __future__ import annotations


class SyncError(RuntimeError):
    pass


class SessionError(SyncError):
    """The captured session cannot be used; the run must stop."""


class NoCookiesError(SessionError):
    pass


class MissingAuthCookieError(SessionError):
    pass


class ExpiredSessionError(SessionError):
    pass


class SessionRejectedError(SessionError):
    pass


class DownloadFailureError(SyncError):
    """A single export could not be fetched or decoded."""


class StorageError(SyncError):
    """The dataset store cannot be read or written; the run must stop."""


class StorageReadError(StorageError):
    pass


class StorageAppendError(StorageError):
    def __init__(self, kind: str, pending: int, cause: BaseException | None = None) -> None:
        self.kind = kind
        self.pending = pending
        message = f"Failed to append {pending} {kind} records"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
