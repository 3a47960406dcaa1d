"""Test User domain models."""

import pytest
from pydantic import ValidationError

from user_records.app.entities.user import User, UserData, UserPatch


class TestUserData:
    """Test the validated payload model."""

    def test_valid_payload(self):
        data = UserData(username="jdoe", email="jdoe@example.com", phone="555-1234")

        assert data.username == "jdoe"
        assert data.email == "jdoe@example.com"
        assert data.phone == "555-1234"

    @pytest.mark.parametrize("missing", ["username", "email", "phone"])
    def test_required_fields(self, missing: str):
        payload = {"username": "a", "email": "a@x.com", "phone": "1"}
        del payload[missing]

        with pytest.raises(ValidationError):
            UserData(**payload)

    @pytest.mark.parametrize("field", ["username", "email", "phone"])
    def test_empty_strings_rejected(self, field: str):
        payload = {"username": "a", "email": "a@x.com", "phone": "1", field: ""}

        with pytest.raises(ValidationError):
            UserData(**payload)

    def test_id_and_unknown_keys_ignored(self):
        data = UserData.model_validate(
            {"id": 9, "username": "a", "email": "a@x.com", "phone": "1", "role": "admin"}
        )

        assert data.model_dump() == {"username": "a", "email": "a@x.com", "phone": "1"}


class TestUser:
    def test_user_serializes_with_id(self):
        user = User(id=3, username="a", email="a@x.com", phone="1")

        assert user.model_dump() == {
            "username": "a",
            "email": "a@x.com",
            "phone": "1",
            "id": 3,
        }

    def test_equality_by_value(self):
        assert User(id=1, username="a", email="e", phone="p") == User(
            id=1, username="a", email="e", phone="p"
        )
        assert User(id=1, username="a", email="e", phone="p") != User(
            id=2, username="a", email="e", phone="p"
        )


class TestUserPatch:
    """Test the optional field set used for partial updates."""

    def test_empty_patch_has_no_changes(self):
        assert UserPatch().changes() == {}

    def test_only_present_non_empty_fields(self):
        patch = UserPatch(username="b", email="", phone=None)

        assert patch.changes() == {"username": "b"}

    def test_unknown_keys_and_id_dropped(self):
        patch = UserPatch.model_validate({"id": 5, "admin": True, "phone": "9"})

        assert patch.changes() == {"phone": "9"}
        assert not hasattr(patch, "id")

    def test_non_string_values_ignored(self):
        patch = UserPatch.model_validate({"email": 12, "username": ["x"], "phone": "9"})

        assert patch.email is None
        assert patch.changes() == {"phone": "9"}
