"""User storage interface and implementations.

Provides a unified interface for user records with two backends: a
thread-safe in-process store and a relational database reached through
SQLModel sessions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from user_records.app.core.exceptions import StorageError, UserNotFoundError
from user_records.app.core.services import DbManageService, DbSessionService
from user_records.app.core.storage.rwlock import ReadWriteLock
from user_records.app.entities.user import User, UserData, UserPatch, UserTable
from user_records.app.runtime.config.config_data import ConfigData
from user_records.app.runtime.context import get_config


class UserStorage(ABC):
    """Abstract interface for user record storage backends."""

    backend_name: str = "unknown"

    @abstractmethod
    def list_all(self) -> list[User]:
        """Return a snapshot of every stored user."""
        pass

    @abstractmethod
    def get(self, user_id: int) -> User:
        """Retrieve a user.

        Args:
            user_id: Identifier assigned at creation

        Raises:
            UserNotFoundError: No user with that id exists
        """
        pass

    @abstractmethod
    def create(self, candidate: UserData) -> User:
        """Store a new user under the next free identifier.

        Any ``id`` carried by ``candidate`` is ignored.

        Returns:
            The stored user including its assigned id
        """
        pass

    @abstractmethod
    def update(self, user_id: int, replacement: UserData) -> User:
        """Replace every field of an existing user, keeping its id.

        Raises:
            UserNotFoundError: No user with that id exists
        """
        pass

    @abstractmethod
    def patch(self, user_id: int, fields: UserPatch) -> User:
        """Overwrite only the patchable fields present in ``fields``.

        Raises:
            UserNotFoundError: No user with that id exists
        """
        pass

    @abstractmethod
    def delete(self, user_id: int) -> None:
        """Remove a user. Its id is never handed out again.

        Raises:
            UserNotFoundError: No user with that id exists
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the storage backend is healthy."""
        pass

    def close(self) -> None:
        """Release backend resources."""


class InMemoryUserStorage(UserStorage):
    """Thread-safe in-process user store.

    Reads share a reader/writer lock; every mutation holds it exclusively, so
    mutations never interleave and readers never see a half-applied change.
    Records are copied on the way in and out.
    """

    backend_name = "memory"

    def __init__(self) -> None:
        self._data: dict[int, User] = {}
        self._next_id = 1
        self._lock = ReadWriteLock()

    def list_all(self) -> list[User]:
        with self._lock.read_locked():
            return [user.model_copy() for user in self._data.values()]

    def get(self, user_id: int) -> User:
        with self._lock.read_locked():
            user = self._data.get(user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            return user.model_copy()

    def create(self, candidate: UserData) -> User:
        with self._lock.write_locked():
            user = _to_user(self._next_id, candidate)
            self._next_id += 1
            self._data[user.id] = user
        logger.bind(user_id=user.id).debug("user.created")
        return user.model_copy()

    def update(self, user_id: int, replacement: UserData) -> User:
        with self._lock.write_locked():
            if user_id not in self._data:
                raise UserNotFoundError(user_id)
            user = _to_user(user_id, replacement)
            self._data[user_id] = user
        logger.bind(user_id=user_id).debug("user.updated")
        return user.model_copy()

    def patch(self, user_id: int, fields: UserPatch) -> User:
        changes = fields.changes()
        with self._lock.write_locked():
            existing = self._data.get(user_id)
            if existing is None:
                raise UserNotFoundError(user_id)
            user = existing.model_copy(update=changes)
            self._data[user_id] = user
        logger.bind(user_id=user_id, fields=sorted(changes)).debug("user.patched")
        return user.model_copy()

    def delete(self, user_id: int) -> None:
        with self._lock.write_locked():
            if self._data.pop(user_id, None) is None:
                raise UserNotFoundError(user_id)
        logger.bind(user_id=user_id).debug("user.deleted")

    def is_available(self) -> bool:
        """In-memory storage is always available."""
        return True


class SqlUserStorage(UserStorage):
    """Relational user storage.

    Each call runs in its own transaction. There is no process-level lock;
    consistency comes from the database's transaction isolation. Driver and
    connection failures surface as StorageError.
    """

    backend_name = "database"

    def __init__(self, database_service: DbSessionService):
        self._db = database_service

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        try:
            with self._db.session_scope() as session:
                yield session
        except SQLAlchemyError as e:
            raise StorageError(f"Database operation failed: {e}") from e

    @staticmethod
    def _get_row(session: Session, user_id: int) -> UserTable:
        row = session.get(UserTable, user_id)
        if row is None:
            raise UserNotFoundError(user_id)
        return row

    def list_all(self) -> list[User]:
        with self._transaction() as session:
            rows = session.exec(select(UserTable).order_by(UserTable.id)).all()
            return [User.model_validate(row, from_attributes=True) for row in rows]

    def get(self, user_id: int) -> User:
        with self._transaction() as session:
            row = self._get_row(session, user_id)
            return User.model_validate(row, from_attributes=True)

    def create(self, candidate: UserData) -> User:
        with self._transaction() as session:
            row = UserTable(
                username=candidate.username,
                email=candidate.email,
                phone=candidate.phone,
            )
            session.add(row)
            session.flush()
            user = User.model_validate(row, from_attributes=True)
        logger.bind(user_id=user.id).debug("user.created")
        return user

    def update(self, user_id: int, replacement: UserData) -> User:
        with self._transaction() as session:
            row = self._get_row(session, user_id)
            row.username = replacement.username
            row.email = replacement.email
            row.phone = replacement.phone
            session.add(row)
            session.flush()
            user = User.model_validate(row, from_attributes=True)
        logger.bind(user_id=user_id).debug("user.updated")
        return user

    def patch(self, user_id: int, fields: UserPatch) -> User:
        changes = fields.changes()
        with self._transaction() as session:
            row = self._get_row(session, user_id)
            for name, value in changes.items():
                setattr(row, name, value)
            session.add(row)
            session.flush()
            user = User.model_validate(row, from_attributes=True)
        logger.bind(user_id=user_id, fields=sorted(changes)).debug("user.patched")
        return user

    def delete(self, user_id: int) -> None:
        with self._transaction() as session:
            row = self._get_row(session, user_id)
            session.delete(row)
        logger.bind(user_id=user_id).debug("user.deleted")

    def is_available(self) -> bool:
        return self._db.health_check()

    def close(self) -> None:
        self._db.dispose()


def _to_user(user_id: int, data: UserData) -> User:
    return User(
        id=user_id,
        username=data.username,
        email=data.email,
        phone=data.phone,
    )


def build_user_storage(config: ConfigData | None = None) -> UserStorage:
    """Create the storage backend selected by ``config.storage.backend``.

    The database backend is checked for connectivity and its tables are
    created before it is returned.

    Raises:
        StorageError: The configured database cannot be reached
    """
    config = config or get_config()

    if config.storage.backend == "database":
        safe_url = make_url(config.database.url).render_as_string(hide_password=True)
        database_service = DbSessionService(config)
        if not database_service.health_check():
            database_service.dispose()
            raise StorageError(f"Database unreachable at {safe_url}")
        try:
            DbManageService(database_service.engine).create_all()
        except SQLAlchemyError as e:
            database_service.dispose()
            raise StorageError(f"Failed to create tables: {e}") from e
        logger.info("User storage: database ({})", safe_url)
        return SqlUserStorage(database_service)

    logger.info("User storage: in-memory")
    return InMemoryUserStorage()
