"""
Users blueprint (session endpoints):
- POST /users/register       multipart: fields + avatar (required) / coverImage (optional)
- POST /users/login          returns user + token pair, sets both cookies
- POST /users/logout         clears the stored refresh token and both cookies
- POST /users/refresh-token  rotates the token pair, resets both cookies
- GET  /users/me             current user

Token delivery is via http-only cookies; the same tokens are also returned in
the body for clients that cannot use cookies.
"""
from __future__ import annotations

import os
import uuid

from flask import Blueprint, request, g, current_app
from werkzeug.utils import secure_filename

from api.responses import ApiResponse
from utils.decorators import jwt_required, ACCESS_COOKIE, REFRESH_COOKIE
from utils.media import remove_local_file

bp = Blueprint("users", __name__)

UPLOAD_PARTS = ("avatar", "coverImage")


def _controller():
    return current_app.extensions["session_controller"]


def _settings():
    return current_app.extensions["auth_settings"]


def _stash_uploads() -> dict:
    """Save the first file of each upload part to UPLOAD_FOLDER; returns part -> [path]."""
    folder = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(folder, exist_ok=True)
    stashed = {}
    for part in UPLOAD_PARTS:
        storages = [f for f in request.files.getlist(part) if f and f.filename]
        if not storages:
            continue
        name = secure_filename(storages[0].filename) or "upload"
        path = os.path.join(folder, f"{uuid.uuid4().hex}-{name}")
        storages[0].save(path)
        stashed[part] = [path]
    return stashed


def _request_data() -> dict:
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


def _set_token_cookies(response, tokens):
    options = _settings().cookie_options()
    response.set_cookie(ACCESS_COOKIE, tokens.access_token, **options)
    response.set_cookie(REFRESH_COOKIE, tokens.refresh_token, **options)
    return response


def _clear_token_cookies(response):
    options = _settings().cookie_options()
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)
    return response


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Users
    consumes:
      - multipart/form-data
    parameters:
      - { in: formData, name: username, type: string, required: true }
      - { in: formData, name: email, type: string, required: true }
      - { in: formData, name: fullName, type: string, required: true }
      - { in: formData, name: password, type: string, required: true }
      - { in: formData, name: avatar, type: file, required: true }
      - { in: formData, name: coverImage, type: file, required: false }
    responses:
      201:
        description: Created
      400:
        description: Missing fields or avatar
      409:
        description: Username or email already registered
    """
    stashed = _stash_uploads()
    try:
        user = _controller().register(request.form.to_dict(), stashed)
    finally:
        for paths in stashed.values():
            for path in paths:
                remove_local_file(path)
    return ApiResponse(201, user, "User registered successfully").to_response()


@bp.post("/login")
def login():
    """
    Login: returns user, access token and refresh token; sets both cookies
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             username: { type: string }
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid credentials
      404:
        description: No such user
    """
    result = _controller().login(_request_data())
    body, status = ApiResponse(200, result.to_dict(), "User logged in successfully").to_response()
    return _set_token_cookies(body, result.tokens), status


@bp.post("/logout")
@jwt_required()
def logout():
    """
    Logout: clears the stored refresh token and both cookies
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: Logged out
      401:
        description: Unauthorized
    """
    _controller().logout(g.current_user.id)
    body, status = ApiResponse(200, {}, "User logged out").to_response()
    return _clear_token_cookies(body), status


@bp.post("/refresh-token")
def refresh_token():
    """
    Rotate the token pair using a refresh token (cookie or body)
    ---
    tags:
      - Users
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: New access and refresh tokens
      401:
        description: Missing, invalid or reused refresh token
    """
    incoming = request.cookies.get(REFRESH_COOKIE) or _request_data().get("refreshToken")
    tokens = _controller().refresh(incoming)
    body, status = ApiResponse(200, tokens.to_dict(), "Access token refreshed").to_response()
    return _set_token_cookies(body, tokens), status


@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    user = _controller().current_user(g.current_user.id)
    return ApiResponse(200, user, "Current user fetched successfully").to_response()
