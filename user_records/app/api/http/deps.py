"""FastAPI dependency implementations."""

from __future__ import annotations

from fastapi import Request

from user_records.app.api.http.app_data import ApplicationDependencies
from user_records.app.core.storage import UserStorage


def get_user_storage(request: Request) -> UserStorage:
    """Get the user storage instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.user_storage
