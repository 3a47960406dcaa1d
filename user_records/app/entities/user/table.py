"""User database table model."""

from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


class UserTable(SQLModel, table=True):
    """Database persistence model for users.

    This represents how the User entity is stored in the database. SQLite
    AUTOINCREMENT keeps ids of deleted rows from being handed out again.
    """

    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id: int | None = Field(default=None, primary_key=True)
    username: str
    email: str
    phone: str
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
    )
