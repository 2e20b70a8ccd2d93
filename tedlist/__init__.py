"""
Tedlist – Flask application factory.
Item swapping backend: listings, swipe matching, deals, notifications and
a WebSocket push channel.
"""
import logging
import os

from flask import Flask, jsonify, send_from_directory
from werkzeug.exceptions import HTTPException

from tedlist.config import config
from tedlist.errors import TedlistError, Unauthenticated
from tedlist.extensions import db, login_manager, limiter, migrate, sock, connections

log = logging.getLogger(__name__)


def create_app(config_name: str = "default") -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name])

    # Ensure instance directory exists (SQLite and local uploads live here)
    os.makedirs(app.instance_path, exist_ok=True)
    app.config.setdefault("UPLOAD_FOLDER", os.path.join(app.instance_path, "uploads"))

    _configure_logging(app)

    # ── Initialise extensions ────────────────────────────────────────────────
    db.init_app(app)
    login_manager.init_app(app)
    limiter.init_app(app)
    migrate.init_app(app, db)
    sock.init_app(app)
    connections.init_app(app)

    if app.config.get("TALISMAN_ENABLED"):
        from flask_talisman import Talisman
        Talisman(app, **app.config.get("TALISMAN_CONFIG", {}))

    _configure_auth()

    # ── Register blueprints ──────────────────────────────────────────────────
    from tedlist.blueprints.auth import auth_bp
    from tedlist.blueprints.items import items_bp
    from tedlist.blueprints.trading import trading_bp
    from tedlist.blueprints.deals import deals_bp
    from tedlist.blueprints.notifications import notif_bp
    from tedlist.blueprints.rewards import rewards_bp
    from tedlist.blueprints.admin import admin_bp
    from tedlist.blueprints.vision import vision_bp
    from tedlist.blueprints.realtime import realtime_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(items_bp)
    app.register_blueprint(trading_bp)
    app.register_blueprint(deals_bp)
    app.register_blueprint(notif_bp)
    app.register_blueprint(rewards_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(vision_bp)
    app.register_blueprint(realtime_bp)

    from tedlist.cli import register_commands
    register_commands(app)

    # ── Plain routes ─────────────────────────────────────────────────────────
    @app.route("/health")
    def health():
        return jsonify(status="ok")

    @app.route("/uploads/<path:filename>")
    def uploads(filename):
        return send_from_directory(app.config["UPLOAD_FOLDER"], filename, max_age=86400)

    _register_error_handlers(app)

    # ── Database ─────────────────────────────────────────────────────────────
    with app.app_context():
        import importlib
        importlib.import_module("tedlist.models")
        db.create_all()

    return app


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
    logging.getLogger("tedlist").setLevel(level)
    app.logger.setLevel(level)


def _configure_auth() -> None:
    """Bearer-token identity for Flask-Login. No cookie sessions are used."""

    @login_manager.request_loader
    def load_user_from_request(req):
        from tedlist.models.user import User
        from tedlist.utils.tokens import bearer_from_header, verify_token

        user_id = verify_token(bearer_from_header(req.headers.get("Authorization")))
        if user_id is None:
            return None
        return db.session.get(User, user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        raise Unauthenticated("Please authenticate.")


def _register_error_handlers(app: Flask) -> None:

    @app.errorhandler(TedlistError)
    def tedlist_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify(success=False, error=e.name.lower().replace(" ", "_"),
                       message=e.description), e.code

    @app.errorhandler(500)
    def internal_error(e):
        db.session.rollback()
        app.logger.exception("Unhandled error")
        return jsonify(success=False, error="error", message="Something went wrong!"), 500
