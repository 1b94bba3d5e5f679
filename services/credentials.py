from __future__ import annotations

from typing import Mapping, Optional, Sequence

from marshmallow import ValidationError

from models.schemas.user import UserRegisterSchema
from utils.errors import ApiError, ErrorKind

REQUIRED_FIELDS = ("username", "email", "fullName", "password")


def first_file(files: Optional[Mapping[str, Sequence[str]]], name: str) -> Optional[str]:
    """First file reference uploaded under `name`, if any."""
    if not files:
        return None
    refs = files.get(name) or []
    return refs[0] if refs else None


class CredentialValidator:
    """Registration checks: field presence/shape, identity uniqueness, avatar presence."""

    def __init__(self, storage):
        self.storage = storage
        self.schema = UserRegisterSchema()

    def validate_fields(self, fields: Mapping) -> dict:
        """Return normalized registration data or raise ApiError(VALIDATION)."""
        raw = dict(fields or {})
        blank = [
            name for name in REQUIRED_FIELDS
            if not isinstance(raw.get(name), str) or not raw[name].strip()
        ]
        if blank:
            raise ApiError(
                ErrorKind.VALIDATION,
                "All fields are required.",
                errors=[{"field": name, "message": "Field may not be blank."} for name in blank],
            )
        try:
            return self.schema.load(raw)
        except ValidationError as err:
            raise ApiError(
                ErrorKind.VALIDATION,
                "Invalid registration data.",
                errors=[{"field": f, "message": m} for f, m in sorted(err.messages.items())],
            ) from err

    def ensure_unique(self, username: str, email: str) -> None:
        if self.storage.find_user(username=username, email=email) is not None:
            raise ApiError(ErrorKind.CONFLICT, "User with email or username already exists.")

    def require_avatar(self, files) -> str:
        avatar = first_file(files, "avatar")
        if not avatar:
            raise ApiError(ErrorKind.VALIDATION, "Avatar file is required.")
        return avatar

    def validate_registration(self, fields: Mapping, files) -> dict:
        """
        Full pre-creation check. Returns normalized fields plus the avatar
        and (optional) cover image references.
        """
        data = self.validate_fields(fields)
        self.ensure_unique(data["username"], data["email"])
        data["avatar_path"] = self.require_avatar(files)
        data["cover_image_path"] = first_file(files, "coverImage")
        return data
