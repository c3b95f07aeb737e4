"""Initialize the Flask app and its extensions."""

import json
import os

import firebase_admin
from firebase_admin import credentials
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from .auth.tokens import FirebaseTokenVerifier
from .core.cache import HackathonCache
from .core.constants import DEFAULT_FRONTEND_URL, DEFAULT_HACKATHON_CACHE_TTL
from .extensions import mail
from .hackathons.escrow import StoredEscrowClient
from .utils import MailEmailSender


def _load_credentials(app):
    """Find Firebase credentials in the environment, a local file, or ADC."""
    cred = None
    project_id = None

    # First, try to load from environment variable (for production)
    cred_json = os.environ.get("FIREBASE_CREDENTIALS_JSON")
    if cred_json:
        try:
            cred_info = json.loads(cred_json)
            project_id = cred_info.get("project_id")
            cred = credentials.Certificate(cred_info)
        except (json.JSONDecodeError, ValueError) as e:
            app.logger.error(f"Error parsing FIREBASE_CREDENTIALS_JSON: {e}")

    # If env var fails or is not present, try loading from file (for local dev)
    if not cred:
        cred_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)), "firebase_credentials.json"
        )
        if os.path.exists(cred_path):
            try:
                with open(cred_path, "r") as f:
                    project_id = json.load(f).get("project_id")
                cred = credentials.Certificate(cred_path)
            except (json.JSONDecodeError, ValueError) as e:
                app.logger.error(f"Error loading credentials from file: {e}")

    if not cred:
        try:
            cred = credentials.ApplicationDefault()
            project_id = os.environ.get("FIREBASE_PROJECT_ID")
        except Exception as e:
            app.logger.error(
                f"Could not find any valid credentials (env, file, or default): {e}"
            )

    return cred, project_id


def create_app(test_config=None):
    """Create and configure an instance of the Flask application."""
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("SECRET_KEY") or "dev",
        MAIL_SERVER=os.environ.get("MAIL_SERVER") or "smtp.gmail.com",
        MAIL_PORT=int(os.environ.get("MAIL_PORT") or 587),
        MAIL_USE_TLS=(os.environ.get("MAIL_USE_TLS") or "true").lower()
        in ["true", "1", "t"],
        MAIL_USE_SSL=(os.environ.get("MAIL_USE_SSL") or "false").lower()
        in ["true", "1", "t"],
        MAIL_USERNAME=os.environ.get("MAIL_USERNAME"),
        MAIL_PASSWORD=os.environ.get("MAIL_PASSWORD"),
        MAIL_DEFAULT_SENDER=os.environ.get("MAIL_DEFAULT_SENDER")
        or "noreply@boundlessfi.xyz",
        HACKATHON_CACHE_TTL=int(
            os.environ.get("HACKATHON_CACHE_TTL") or DEFAULT_HACKATHON_CACHE_TTL
        ),
        FRONTEND_URL=os.environ.get("FRONTEND_URL") or DEFAULT_FRONTEND_URL,
    )

    if test_config:
        app.config.update(test_config)

    # Initialize Firebase Admin SDK only if not in testing mode
    if not app.config.get("TESTING"):
        cred, project_id = _load_credentials(app)
        if cred and not firebase_admin._apps:
            try:
                options = {"projectId": project_id} if project_id else None
                firebase_admin.initialize_app(cred, options)
            except ValueError:
                # This can happen if the app is already initialized, which is fine.
                app.logger.info("Firebase app already initialized.")

    # Initialize extensions
    mail.init_app(app)

    # Capabilities used by the services; tests swap in doubles
    defaults = {
        "token_verifier": ("TOKEN_VERIFIER", FirebaseTokenVerifier),
        "email_sender": ("EMAIL_SENDER", MailEmailSender),
        "escrow_client": ("ESCROW_CLIENT", StoredEscrowClient),
        "hackathon_cache": ("HACKATHON_CACHE", HackathonCache),
    }
    for name, (config_key, factory) in defaults.items():
        override = app.config.get(config_key)
        app.extensions[name] = override if override is not None else factory()

    # Register blueprints
    from . import hackathons as hackathons_bp

    app.register_blueprint(hackathons_bp.bp)

    from . import public as public_bp

    app.register_blueprint(public_bp.bp)

    from . import error_handlers

    app.register_blueprint(error_handlers.error_handlers_bp)

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    return app
