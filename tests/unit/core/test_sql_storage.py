"""SQL storage tests (using in-memory SQLite for fast, real database testing)."""

import pytest
from sqlmodel import select

from user_records.app.core.exceptions import StorageError, UserNotFoundError
from user_records.app.core.services import DbManageService, DbSessionService
from user_records.app.core.storage import (
    InMemoryUserStorage,
    SqlUserStorage,
    build_user_storage,
)
from user_records.app.entities.user import User, UserData, UserTable
from user_records.app.runtime.config.config_data import ConfigData


class TestSqlUserStorage:
    """Test behaviour specific to the relational backend."""

    def test_rows_are_persisted(self, sql_storage: SqlUserStorage, db_service: DbSessionService):
        created = sql_storage.create(UserData(username="a", email="a@x.com", phone="1"))

        with db_service.session_scope() as session:
            row = session.exec(select(UserTable).where(UserTable.id == created.id)).one()
            assert row.username == "a"
            assert row.created_at is not None

    def test_returns_domain_entities(self, sql_storage: SqlUserStorage):
        sql_storage.create(UserData(username="a", email="a@x.com", phone="1"))

        users = sql_storage.list_all()
        assert all(type(u) is User for u in users)

    def test_list_is_ordered_by_id(self, sql_storage: SqlUserStorage):
        for name in ("c", "a", "b"):
            sql_storage.create(UserData(username=name, email=f"{name}@x.com", phone="1"))

        assert [u.id for u in sql_storage.list_all()] == [1, 2, 3]

    def test_not_found_rolls_back_cleanly(self, sql_storage: SqlUserStorage):
        with pytest.raises(UserNotFoundError):
            sql_storage.delete(9)

        created = sql_storage.create(UserData(username="a", email="a@x.com", phone="1"))
        assert sql_storage.get(created.id) == created

    def test_driver_errors_become_storage_errors(
        self, sql_storage: SqlUserStorage, db_service: DbSessionService
    ):
        DbManageService(db_service.engine).drop_all()

        with pytest.raises(StorageError) as exc_info:
            sql_storage.list_all()
        assert not isinstance(exc_info.value, UserNotFoundError)

        with pytest.raises(StorageError):
            sql_storage.create(UserData(username="a", email="a@x.com", phone="1"))

    def test_health_check(self, sql_storage: SqlUserStorage):
        assert sql_storage.is_available() is True


class TestBuildUserStorage:
    """Test backend selection from configuration."""

    def test_defaults_to_memory(self, test_config: ConfigData):
        storage = build_user_storage(test_config)
        assert isinstance(storage, InMemoryUserStorage)

    def test_database_backend_creates_tables(self, test_config: ConfigData):
        test_config.storage.backend = "database"
        test_config.database.url = "sqlite:///:memory:"

        storage = build_user_storage(test_config)
        try:
            assert isinstance(storage, SqlUserStorage)
            created = storage.create(UserData(username="a", email="a@x.com", phone="1"))
            assert created.id == 1
        finally:
            storage.close()

    def test_unreachable_database_fails_fast(self, test_config: ConfigData, tmp_path):
        test_config.storage.backend = "database"
        test_config.database.url = f"sqlite:///{tmp_path / 'missing' / 'users.db'}"

        with pytest.raises(StorageError):
            build_user_storage(test_config)

    def test_file_database_keeps_ids_across_restarts(
        self, test_config: ConfigData, tmp_path
    ):
        test_config.storage.backend = "database"
        test_config.database.url = f"sqlite:///{tmp_path / 'users.db'}"

        first = build_user_storage(test_config)
        try:
            first.create(UserData(username="a", email="a@x.com", phone="1"))
            second_user = first.create(UserData(username="b", email="b@x.com", phone="2"))
            first.delete(second_user.id)
        finally:
            first.close()

        reopened = build_user_storage(test_config)
        try:
            assert [u.username for u in reopened.list_all()] == ["a"]
            assert reopened.create(UserData(username="c", email="c@x.com", phone="3")).id == 3
        finally:
            reopened.close()
