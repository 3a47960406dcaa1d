"""Shared pytest configuration for the user records test suite."""

from tests.fixtures import *  # noqa: F401,F403
