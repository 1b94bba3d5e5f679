import logging

from flask import Flask
from flasgger import Swagger
from flask_cors import CORS

from .config import get_config, AuthSettings
from .errors import register_error_handlers
from models import storage

SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "User Session API",
        "version": "1.0.0",
        "description": "Registration, login, logout and refresh-token rotation.",
    },
    "basePath": "/",
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Bearer <access token>",
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "user_session_spec",
            "route": "/swagger.json",
            "rule_filter": lambda rule: rule.rule.startswith("/api/v1"),
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}

logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None, media_uploader=None) -> Flask:
    """
    Application factory: creates and configures the Flask app.
    `media_uploader` overrides the HTTP media host client (tests pass a fake).
    """
    from services.session import SessionController
    from services.token_issuer import TokenIssuer
    from utils.media import HttpMediaUploader

    app = Flask(__name__)

    app.config.from_object(get_config(config_name))

    # Cross-Origin Resource Sharing; cookies need credentials support
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        supports_credentials=app.config.get("CORS_ORIGINS", "*") != "*",
    )

    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Uniform error envelope for every failure
    register_error_handlers(app)

    storage.reload(app.config["DATABASE_URL"], echo=app.config.get("DATABASE_ECHO", False))

    if media_uploader is None:
        media_uploader = HttpMediaUploader(
            upload_url=app.config["MEDIA_UPLOAD_URL"],
            api_key=app.config["MEDIA_API_KEY"],
            upload_preset=app.config["MEDIA_UPLOAD_PRESET"],
            timeout=app.config["MEDIA_UPLOAD_TIMEOUT"],
        )
    settings = AuthSettings.from_config(app.config)
    issuer = TokenIssuer(storage, settings)
    app.extensions["auth_settings"] = settings
    app.extensions["token_issuer"] = issuer
    app.extensions["session_controller"] = SessionController(storage, issuer, media_uploader)

    from .health import bp as health_bp
    from .users import bp as users_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(users_bp, url_prefix="/api/v1/users")

    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to User Session API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    logger.info("App created with %s", get_config(config_name).__name__)
    return app
