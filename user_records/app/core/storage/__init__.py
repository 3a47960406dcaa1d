"""User record storage backends."""

from .rwlock import ReadWriteLock
from .user_storage import (
    InMemoryUserStorage,
    SqlUserStorage,
    UserStorage,
    build_user_storage,
)

__all__ = [
    "InMemoryUserStorage",
    "ReadWriteLock",
    "SqlUserStorage",
    "UserStorage",
    "build_user_storage",
]
