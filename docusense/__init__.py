import logging
import os

from flask import Flask, jsonify
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from werkzeug.exceptions import HTTPException

from docusense.config import Config
from docusense.llm import LanguageModel

# ── Extension instances (created once, initialised in create_app) ──────────
db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
)
llm = LanguageModel()
cors = CORS()


def create_app(config_class=Config):
    """Application factory: creates and configures the Flask app."""

    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config["LOG_LEVEL"])
    logging.getLogger("docusense").setLevel(app.config["LOG_LEVEL"])

    # Ensure critical directories exist
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)

    # Initialise extensions
    db.init_app(app)
    bcrypt.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    llm.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    # Registers the bearer-token request loader on login_manager
    from docusense import auth  # noqa: F401
    from docusense.models import User  # noqa: F401

    # ── Register blueprints ─────────────────────────────────────────
    from docusense.auth_routes import auth_bp
    from docusense.routes import api

    app.register_blueprint(auth_bp)
    app.register_blueprint(api)

    @app.route("/")
    def home():
        return jsonify({"message": "DocuSense backend is running"})

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    # ── Error handlers ────────────────────────────────────────────────
    from docusense.errors import APIError

    @app.errorhandler(APIError)
    def api_error(e):
        if e.status_code >= 500:
            db.session.rollback()
            app.logger.error(f"{type(e).__name__}: {e.message} (cause: {e.__cause__!r})")
        return jsonify({"message": e.message}), e.status_code

    @app.errorhandler(413)
    def too_large(e):
        limit_mb = app.config["MAX_CONTENT_LENGTH"] // (1024 * 1024)
        return jsonify({"message": f"File exceeds the {limit_mb} MB upload limit"}), 413

    @app.errorhandler(429)
    def rate_limit_exceeded(e):
        return (
            jsonify(
                {
                    "message": "Too many requests. Please wait a moment before trying again.",
                    "retry_after": str(e.description),
                }
            ),
            429,
        )

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"message": e.description}), e.code

    @app.errorhandler(Exception)
    def internal_error(e):
        db.session.rollback()
        app.logger.exception(f"Unhandled error: {e}")
        return jsonify({"message": "Something went wrong"}), 500

    # ── CLI commands ──────────────────────────────────────────────────
    import click

    @app.cli.command("purge-uploads")
    def purge_uploads():
        """Delete stored files whose retention window has passed."""
        from docusense.documents import purge_expired_uploads

        purged = purge_expired_uploads()
        click.echo(f"Purged {purged} expired upload(s).")

    # Create tables on first run (development convenience)
    with app.app_context():
        db.create_all()

    return app
