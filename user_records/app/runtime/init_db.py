"""Database initialization script."""

from user_records.app.core.services import DbManageService, DbSessionService
from user_records.app.runtime.context import get_config


def init_db() -> None:
    """Create all database tables."""
    database_service = DbSessionService(get_config())
    try:
        DbManageService(database_service.engine).create_all()
    finally:
        database_service.dispose()


if __name__ == "__main__":
    init_db()
