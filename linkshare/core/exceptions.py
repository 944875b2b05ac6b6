"""
Failure taxonomy of the synchronization engine.

Every mutation either completes its whole write sequence or raises one of
these before any remote write is issued (Conflict and AdapterFailure can
also come out of the write itself, in which case nothing was applied).
"""

from typing import Iterable


class SyncError(Exception):
    """Base class for every engine failure."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(SyncError):
    status_code = 401

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class Forbidden(SyncError):
    status_code = 403


class NotFound(SyncError):
    status_code = 404


class InvalidRecord(SyncError):
    status_code = 422


class NoValidInput(SyncError):
    status_code = 400

    def __init__(self, message: str = "No valid email addresses provided"):
        super().__init__(message)


class AllAlreadyMembers(SyncError):
    status_code = 400

    def __init__(self, message: str = "All users are already members of this group"):
        super().__init__(message)


class SelfRemoval(SyncError):
    status_code = 400

    def __init__(self, message: str = "Cannot remove yourself"):
        super().__init__(message)


class Conflict(SyncError):
    """A conditional write lost against a concurrent writer."""

    status_code = 409


class AdapterFailure(SyncError):
    """Any lower-level store or auth error, chained as __cause__."""

    status_code = 502


class UsersNotFound(NotFound):
    def __init__(self, emails: Iterable[str]):
        self.emails = list(emails)
        super().__init__(f"Users not found: {', '.join(self.emails)}")
