"""User domain entity."""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserData(BaseModel):
    """The caller-controlled fields of a user record.

    Used as the request body for create and full update. Unknown keys,
    including a caller-supplied ``id``, are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    username: str = Field(min_length=1, description="User's login name")
    email: str = Field(min_length=1, description="User's email address")
    phone: str = Field(min_length=1, description="User's phone number")


class User(UserData):
    """A stored user record.

    The ``id`` is assigned by storage on creation and never changes afterwards.
    """

    id: int = Field(description="Identifier assigned by storage")


class UserPatch(BaseModel):
    """Optional field set for partial updates.

    Only ``username``, ``email`` and ``phone`` can be patched. A field that is
    absent, ``None``, empty or not a string leaves the stored value untouched.
    """

    PATCHABLE_FIELDS: ClassVar[tuple[str, ...]] = ("username", "email", "phone")

    model_config = ConfigDict(extra="ignore")

    username: str | None = None
    email: str | None = None
    phone: str | None = None

    @field_validator("username", "email", "phone", mode="before")
    @classmethod
    def ignore_non_strings(cls, v: Any) -> str | None:
        return v if isinstance(v, str) else None

    def changes(self) -> dict[str, str]:
        """Return the fields that should overwrite the stored record."""
        changes = {}
        for name in self.PATCHABLE_FIELDS:
            value = getattr(self, name)
            if value:
                changes[name] = value
        return changes
