"""Shared pytest fixtures and helpers for user records tests."""

from .core import *  # noqa: F401,F403
from .storage import *  # noqa: F401,F403
