"""Tests for registration validation: presence, shape, uniqueness, avatar."""

import pytest

from conftest import registration_fields
from models import storage
from models.user import User
from services.credentials import CredentialValidator, first_file
from utils.errors import ApiError, ErrorKind


@pytest.fixture
def validator(app):
    return CredentialValidator(storage)


def _existing_user(**overrides):
    values = dict(
        username="taken",
        email="taken@example.com",
        full_name="Taken User",
        password="secret",
        avatar_url="https://media.example.test/a.png",
    )
    values.update(overrides)
    user = User(**values)
    user.save()
    return user


class TestFieldValidation:
    def test_valid_fields_are_normalized(self, validator):
        data = validator.validate_fields(registration_fields(username="  ABC ", email=" A@B.com "))
        assert data["username"] == "abc"
        assert data["email"] == "a@b.com"
        assert data["full_name"] == "A B"
        assert data["password"] == "secret"

    @pytest.mark.parametrize("field", ["username", "email", "fullName", "password"])
    @pytest.mark.parametrize("value", ["", "   ", "\t\n", None])
    def test_blank_or_missing_field_fails(self, validator, field, value):
        fields = registration_fields(**{field: value})
        if value is None:
            fields.pop(field)
        with pytest.raises(ApiError) as exc:
            validator.validate_fields(fields)
        assert exc.value.kind is ErrorKind.VALIDATION
        assert exc.value.status_code == 400
        assert exc.value.message == "All fields are required."
        assert {"field": field, "message": "Field may not be blank."} in exc.value.errors

    def test_malformed_email_fails(self, validator):
        with pytest.raises(ApiError) as exc:
            validator.validate_fields(registration_fields(email="not-an-email"))
        assert exc.value.kind is ErrorKind.VALIDATION
        assert exc.value.errors[0]["field"] == "email"


class TestUniqueness:
    def test_duplicate_username_conflicts(self, validator):
        _existing_user()
        with pytest.raises(ApiError) as exc:
            validator.ensure_unique("taken", "fresh@example.com")
        assert exc.value.kind is ErrorKind.CONFLICT
        assert exc.value.status_code == 409

    def test_duplicate_email_conflicts(self, validator):
        _existing_user()
        with pytest.raises(ApiError) as exc:
            validator.ensure_unique("fresh", "taken@example.com")
        assert exc.value.kind is ErrorKind.CONFLICT

    def test_fresh_identity_passes(self, validator):
        _existing_user()
        validator.ensure_unique("fresh", "fresh@example.com")


class TestAvatar:
    def test_missing_avatar_fails(self, validator):
        with pytest.raises(ApiError) as exc:
            validator.require_avatar({"coverImage": ["/tmp/cover.png"]})
        assert exc.value.kind is ErrorKind.VALIDATION
        assert exc.value.message == "Avatar file is required."

    def test_first_avatar_is_used(self, validator):
        assert validator.require_avatar({"avatar": ["/tmp/one.png", "/tmp/two.png"]}) == "/tmp/one.png"

    def test_first_file_handles_empty_inputs(self):
        assert first_file(None, "avatar") is None
        assert first_file({"avatar": []}, "avatar") is None

    def test_full_registration_check(self, validator):
        data = validator.validate_registration(
            registration_fields(), {"avatar": ["/tmp/a.png"], "coverImage": ["/tmp/c.png"]}
        )
        assert data["avatar_path"] == "/tmp/a.png"
        assert data["cover_image_path"] == "/tmp/c.png"
