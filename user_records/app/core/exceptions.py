"""Exceptions raised by user record storage."""


class UserRecordsError(Exception):
    """Base class for user record errors."""


class UserNotFoundError(UserRecordsError, LookupError):
    """No user record exists for the requested identifier."""

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class StorageError(UserRecordsError):
    """The storage backend failed (driver or connection error)."""
