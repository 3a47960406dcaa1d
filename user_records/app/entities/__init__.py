"""Entities organized by business concept.

Each entity package holds its domain model (``entity.py``) next to its
database persistence model (``table.py``).
"""

from .user import User, UserData, UserPatch, UserTable

__all__ = ["User", "UserData", "UserPatch", "UserTable"]
