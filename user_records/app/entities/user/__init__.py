"""User entity module.

This module contains all User-related classes organized by responsibility:
- UserData / User / UserPatch: Domain models used by storage and the API
- UserTable: Database persistence model

Storage implementations live in ``user_records.app.core.storage``.
"""

from .entity import User, UserData, UserPatch
from .table import UserTable

__all__ = ["User", "UserData", "UserPatch", "UserTable"]
