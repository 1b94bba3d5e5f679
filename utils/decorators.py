from __future__ import annotations
from functools import wraps
from flask import request, g, current_app
from models import storage
from models.user import User
from utils.errors import ApiError, ErrorKind

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def _access_token() -> str | None:
    """Access token from the Authorization header, else the accessToken cookie."""
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        token = auth.split(" ", 1)[1].strip()
        if token:
            return token
    return request.cookies.get(ACCESS_COOKIE) or None


def jwt_required():
    """
    Require a valid access token, from an `Authorization: Bearer` header
    or the accessToken cookie. Sets g.current_user.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = _access_token()
            if not token:
                raise ApiError(ErrorKind.AUTH, "Unauthorized request")

            issuer = current_app.extensions["token_issuer"]
            decoded = issuer.verify_access_token(token)

            user = storage.get(User, decoded.get("sub"))
            if not user:
                raise ApiError(ErrorKind.AUTH, "Invalid access token")
            g.current_user = user
            return fn(*args, **kwargs)

        return wrapper

    return decorator
