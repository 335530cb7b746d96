import sqlite3

from flask import Flask
from sqlalchemy import event
from sqlalchemy.engine import Engine

from .cli import register_cli
from .errors import register_error_handlers
from .extensions import db, jwt, migrate
from .logging_setup import setup_logging
from .notifications.email import ResendClient
from .storage import LocalFileStorage
from .utils.ratelimit import FixedWindowRateLimiter, InMemoryCounterStore
from .routes.assets import bp as assets_bp
from .routes.auth import bp as auth_bp
from .routes.damage_reports import bp as damage_reports_bp
from .routes.dashboard import bp as dashboard_bp
from .routes.exports import bp as exports_bp
from .routes.functions import bp as functions_bp
from .routes.inspections import bp as inspections_bp
from .routes.inventory import bp as inventory_bp
from .routes.invitations import bp as invitations_bp
from .routes.properties import bp as properties_bp
from .routes.storage import bp as storage_bp
from .routes.users import bp as users_bp
from .routes.warranties import bp as warranties_bp
from config import Config


@event.listens_for(Engine, "connect")
def _sqlite_foreign_keys(dbapi_connection, connection_record):
    # sqlite ignores ON DELETE rules unless asked
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)

    setup_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    app.extensions["storage"] = LocalFileStorage(
        app.config["STORAGE_ROOT"], app.config["STORAGE_PUBLIC_URL"]
    )
    app.extensions["email"] = ResendClient(
        app.config["RESEND_API_KEY"],
        api_url=app.config["RESEND_API_URL"],
        timeout=app.config["EMAIL_TIMEOUT"],
    )

    counters = InMemoryCounterStore()
    app.extensions["rate_limiters"] = {
        "restock": FixedWindowRateLimiter(
            counters, app.config["RESTOCK_EMAILS_PER_HOUR"], namespace="restock"
        ),
        "warranty": FixedWindowRateLimiter(
            counters, app.config["WARRANTY_EMAILS_PER_HOUR"], namespace="warranty"
        ),
    }

    register_error_handlers(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(properties_bp)
    app.register_blueprint(warranties_bp)
    app.register_blueprint(assets_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(damage_reports_bp)
    app.register_blueprint(inspections_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(invitations_bp)
    app.register_blueprint(functions_bp)
    app.register_blueprint(exports_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(storage_bp)

    register_cli(app)

    app.logger.info("strmanager app created (db=%s)", app.config["SQLALCHEMY_DATABASE_URI"])
    return app
