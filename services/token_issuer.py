"""
Access/refresh token pairs.

The access token is stateless. The refresh token is persisted on the user row
and rotated on every issue, so only the most recently issued one verifies.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from api.config import AuthSettings
from models.schemas.user import TokenPairSchema
from models.user import User, SessionState
from utils.errors import ApiError, ErrorKind
from utils.security import create_token, decode_token, TokenError

logger = logging.getLogger(__name__)

ISSUE_FAILED = "Something went wrong while generating refresh and access token"
REFRESH_REUSED = "Refresh token is expired or used"

token_pair_schema = TokenPairSchema()


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str

    def to_dict(self) -> dict:
        return token_pair_schema.dump(self)


class TokenIssuer:
    def __init__(self, storage, settings: AuthSettings):
        self.storage = storage
        self.settings = settings

    def _sign_pair(self, user: User) -> TokenPair:
        s = self.settings
        access = create_token(
            subject=user.id,
            token_type="access",
            secret=s.access_token_secret,
            expires=s.access_token_expires,
            algorithm=s.algorithm,
            issuer=s.issuer,
            claims={"email": user.email, "username": user.username, "fullName": user.full_name},
        )
        refresh = create_token(
            subject=user.id,
            token_type="refresh",
            secret=s.refresh_token_secret,
            expires=s.refresh_token_expires,
            algorithm=s.algorithm,
            issuer=s.issuer,
        )
        return TokenPair(access, refresh)

    def issue_token_pair(self, user_id: str) -> TokenPair:
        """Sign a fresh pair for `user_id` and persist the refresh token, replacing any previous one."""
        try:
            user = self.storage.get(User, user_id)
            if user is None:
                raise LookupError(f"user {user_id} not found")
            pair = self._sign_pair(user)
            updated = self.storage.update_user_fields(
                user.id,
                {"refresh_token": pair.refresh_token, "session_state": SessionState.AUTHENTICATED},
            )
            if not updated:
                raise LookupError(f"user {user_id} vanished before refresh token was stored")
        except Exception as exc:
            logger.exception("Token issue failed for user %s", user_id)
            raise ApiError(ErrorKind.INTERNAL, ISSUE_FAILED) from exc
        return pair

    def rotate(self, user_id: str, presented_refresh_token: str) -> TokenPair:
        """
        Like issue_token_pair, but the write only lands if the stored refresh
        token is still `presented_refresh_token`. A concurrent rotation that got
        there first makes this one fail as a reuse.
        """
        try:
            user = self.storage.get(User, user_id)
            if user is None:
                raise LookupError(f"user {user_id} not found")
            pair = self._sign_pair(user)
            updated = self.storage.update_user_fields(
                user.id,
                {"refresh_token": pair.refresh_token, "session_state": SessionState.AUTHENTICATED},
                expected_refresh_token=presented_refresh_token,
            )
        except Exception as exc:
            logger.exception("Token rotation failed for user %s", user_id)
            raise ApiError(ErrorKind.INTERNAL, ISSUE_FAILED) from exc
        if not updated:
            logger.warning("Lost refresh rotation race for user %s", user_id)
            raise ApiError(ErrorKind.AUTH, REFRESH_REUSED)
        return pair

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        try:
            return decode_token(
                token, self.settings.access_token_secret, expected_type="access", algorithm=self.settings.algorithm
            )
        except TokenError as exc:
            raise ApiError(ErrorKind.AUTH, "Invalid access token", errors=[str(exc)]) from exc

    def verify_refresh_token(self, token: str) -> Dict[str, Any]:
        try:
            return decode_token(
                token, self.settings.refresh_token_secret, expected_type="refresh", algorithm=self.settings.algorithm
            )
        except TokenError as exc:
            raise ApiError(ErrorKind.AUTH, "Invalid refresh token", errors=[str(exc)]) from exc
