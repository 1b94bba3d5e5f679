"""
Environment-aware configuration.
Flask config classes are read from the environment (.env supported);
AuthSettings is the explicit settings object handed to the token and
cookie code so it never reaches for globals.
"""
import os
import tempfile
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()  # Read .env if present


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///user-session.db")
    DATABASE_ECHO = False

    # Tokens: access and refresh use distinct secrets and lifetimes
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "user-session-api")
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "dev-access-secret-change-me")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "86400")))
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "dev-refresh-secret-change-me")
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", "864000")))

    COOKIE_SECURE = _env_bool("COOKIE_SECURE", "true")
    COOKIE_SAMESITE = os.getenv("COOKIE_SAMESITE", "Lax")

    # Uploads are stashed locally, then pushed to the media host
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(tempfile.gettempdir(), "user-session-uploads"))
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(16 * 1024 * 1024)))
    MEDIA_UPLOAD_URL = os.getenv("MEDIA_UPLOAD_URL", "")
    MEDIA_API_KEY = os.getenv("MEDIA_API_KEY", "")
    MEDIA_UPLOAD_PRESET = os.getenv("MEDIA_UPLOAD_PRESET", "")
    MEDIA_UPLOAD_TIMEOUT = float(os.getenv("MEDIA_UPLOAD_TIMEOUT", "30"))


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    DATABASE_ECHO = _env_bool("DATABASE_ECHO", "false")


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    ACCESS_TOKEN_SECRET = "test-access-secret"
    REFRESH_TOKEN_SECRET = "test-refresh-secret"
    ACCESS_TOKEN_EXPIRES = timedelta(minutes=15)
    REFRESH_TOKEN_EXPIRES = timedelta(days=1)


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig


@dataclass(frozen=True)
class AuthSettings:
    access_token_secret: str
    access_token_expires: timedelta
    refresh_token_secret: str
    refresh_token_expires: timedelta
    algorithm: str = "HS256"
    issuer: str = "user-session-api"
    cookie_secure: bool = True
    cookie_httponly: bool = True
    cookie_samesite: str = "Lax"

    @classmethod
    def from_config(cls, config) -> "AuthSettings":
        """Build settings from a Flask config mapping."""
        return cls(
            access_token_secret=config["ACCESS_TOKEN_SECRET"],
            access_token_expires=config["ACCESS_TOKEN_EXPIRES"],
            refresh_token_secret=config["REFRESH_TOKEN_SECRET"],
            refresh_token_expires=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "user-session-api"),
            cookie_secure=config.get("COOKIE_SECURE", True),
            cookie_samesite=config.get("COOKIE_SAMESITE", "Lax"),
        )

    def cookie_options(self) -> dict:
        return {
            "httponly": self.cookie_httponly,
            "secure": self.cookie_secure,
            "samesite": self.cookie_samesite,
        }
