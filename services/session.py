"""
Session controller: register / login / logout / refresh.

A user's session is either UNAUTHENTICATED or AUTHENTICATED (see
models.user.SessionState). Login and refresh move it to AUTHENTICATED with a
freshly persisted refresh token; logout and a replayed refresh token move it
back to UNAUTHENTICATED and clear the stored token.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError

from models.schemas.user import UserOutSchema, UserLoginSchema
from models.user import User, SessionState
from services.credentials import CredentialValidator
from services.token_issuer import TokenIssuer, TokenPair, REFRESH_REUSED
from utils.errors import ApiError, ErrorKind, normalize_errors
from utils.media import MediaUploader

logger = logging.getLogger(__name__)

user_out_schema = UserOutSchema()
user_login_schema = UserLoginSchema()


@dataclass(frozen=True)
class LoginResult:
    user: dict
    tokens: TokenPair

    def to_dict(self) -> dict:
        return {"user": self.user, **self.tokens.to_dict()}


class SessionController:
    def __init__(
        self,
        storage,
        issuer: TokenIssuer,
        uploader: MediaUploader,
        validator: Optional[CredentialValidator] = None,
    ):
        self.storage = storage
        self.issuer = issuer
        self.uploader = uploader
        self.validator = validator or CredentialValidator(storage)

    def _project(self, user_id: str) -> dict:
        user = self.storage.get(User, user_id)
        if user is None:
            raise ApiError(ErrorKind.INTERNAL, "Something went wrong while loading the user")
        return user_out_schema.dump(user)

    @normalize_errors("Something went wrong while registering the user")
    def register(self, fields: Mapping, files: Optional[Mapping] = None) -> dict:
        data = self.validator.validate_registration(fields, files)

        avatar_url = self.uploader.upload(data["avatar_path"])
        if not avatar_url:
            raise ApiError(ErrorKind.UPLOAD, "Avatar file upload failed.")
        cover_image_url = None
        if data["cover_image_path"]:
            cover_image_url = self.uploader.upload(data["cover_image_path"])

        user = User(
            username=data["username"],
            email=data["email"],
            full_name=data["full_name"],
            password=data["password"],
            avatar_url=avatar_url,
            cover_image_url=cover_image_url or "",
            session_state=SessionState.UNAUTHENTICATED,
        )
        try:
            user.save()
        except IntegrityError as exc:
            # lost a race with a concurrent registration of the same identity
            raise ApiError(ErrorKind.CONFLICT, "User with email or username already exists.") from exc

        created = self.storage.get(User, user.id, fresh=True)
        if created is None:
            raise ApiError(ErrorKind.INTERNAL, "Something went wrong while registering the user")
        logger.info("Registered user %s", created.username)
        return user_out_schema.dump(created)

    @normalize_errors("Something went wrong while logging in")
    def login(self, credentials: Mapping) -> LoginResult:
        try:
            creds = user_login_schema.load(dict(credentials or {}))
        except ValidationError as err:
            raise ApiError(ErrorKind.VALIDATION, "Invalid login data.", errors=[err.normalized_messages()]) from err
        username, email = creds["username"], creds["email"]
        if not username and not email:
            raise ApiError(ErrorKind.VALIDATION, "Username or email is required.")

        user = self.storage.find_user(username=username, email=email)
        if user is None:
            raise ApiError(ErrorKind.NOT_FOUND, "User does not exist")
        if not user.is_password_correct(creds["password"]):
            raise ApiError(ErrorKind.AUTH, "Invalid user credentials")

        tokens = self.issuer.issue_token_pair(user.id)
        logger.info("User %s logged in", user.username)
        return LoginResult(user=self._project(user.id), tokens=tokens)

    @normalize_errors("Something went wrong while logging out")
    def logout(self, user_id: str) -> None:
        self._end_session(user_id)
        logger.info("User %s logged out", user_id)

    @normalize_errors("Something went wrong while refreshing the access token")
    def refresh(self, incoming_refresh_token: Optional[str]) -> TokenPair:
        if not incoming_refresh_token or not str(incoming_refresh_token).strip():
            raise ApiError(ErrorKind.AUTH, "Unauthorized request")

        claims = self.issuer.verify_refresh_token(incoming_refresh_token)
        user = self.storage.get(User, claims.get("sub"))
        if user is None:
            raise ApiError(ErrorKind.AUTH, "Invalid refresh token")

        if user.session_state != SessionState.AUTHENTICATED or incoming_refresh_token != user.refresh_token:
            # replay of a rotated-out token revokes the live session
            if user.session_state == SessionState.AUTHENTICATED:
                logger.warning("Refresh token reuse for user %s; revoking session", user.id)
                self._end_session(user.id)
            raise ApiError(ErrorKind.AUTH, REFRESH_REUSED)

        tokens = self.issuer.rotate(user.id, incoming_refresh_token)
        logger.info("Rotated tokens for user %s", user.id)
        return tokens

    @normalize_errors()
    def current_user(self, user_id: str) -> dict:
        user = self.storage.get(User, user_id)
        if user is None:
            raise ApiError(ErrorKind.NOT_FOUND, "User does not exist")
        return user_out_schema.dump(user)

    def _end_session(self, user_id: str) -> None:
        self.storage.update_user_fields(
            user_id, {"refresh_token": None, "session_state": SessionState.UNAUTHENTICATED}
        )
