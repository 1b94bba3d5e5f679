import io
from datetime import timedelta

import pytest

from api import create_app
from api.config import AuthSettings
from models import storage
from services.session import SessionController
from services.token_issuer import TokenIssuer
from utils.media import MediaUploader, remove_local_file


class FakeUploader(MediaUploader):
    """Records uploads and hands back a fake hosted URL; fail=True simulates a dead host."""

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def upload(self, local_path):
        if not local_path:
            return None
        self.calls.append(local_path)
        remove_local_file(local_path)
        if self.fail:
            return None
        return f"https://media.example.test/{len(self.calls)}.png"


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def app(uploader, tmp_path):
    app = create_app("testing", media_uploader=uploader)
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")
    storage.drop_all()
    yield app
    storage.close()


@pytest.fixture
def client(app):
    # cookies are asserted on Set-Cookie headers; tokens are sent explicitly
    return app.test_client(use_cookies=False)


@pytest.fixture
def settings():
    return AuthSettings(
        access_token_secret="unit-access",
        access_token_expires=timedelta(minutes=5),
        refresh_token_secret="unit-refresh",
        refresh_token_expires=timedelta(days=1),
    )


@pytest.fixture
def issuer(app, settings):
    return TokenIssuer(storage, settings)


@pytest.fixture
def controller(app, issuer, uploader):
    return SessionController(storage, issuer, uploader)


@pytest.fixture
def stash(tmp_path):
    """Create a stashed upload file and return {part: [path]} for the controller."""
    def _stash(*parts):
        files = {}
        for part in parts:
            path = tmp_path / f"{part}.png"
            path.write_bytes(b"\x89PNG fake")
            files[part] = [str(path)]
        return files
    return _stash


def registration_fields(**overrides):
    fields = {"username": "abc", "email": "a@b.com", "fullName": "A B", "password": "secret"}
    fields.update(overrides)
    return fields


def multipart(fields=None, avatar=True, cover=False):
    data = dict(registration_fields() if fields is None else fields)
    if avatar:
        data["avatar"] = (io.BytesIO(b"\x89PNG avatar"), "avatar.png")
    if cover:
        data["coverImage"] = (io.BytesIO(b"\x89PNG cover"), "cover.png")
    return data
