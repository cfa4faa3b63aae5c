from __future__ import annotations

import logging
import os

from flask import Flask
from flask_cors import CORS
from sqlalchemy import event
from sqlalchemy.engine import Engine
from werkzeug.security import generate_password_hash

from .config import Config
from .errors import register_error_handlers
from .extensions import db
from .routes import register_routes


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
    if dbapi_connection.__class__.__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _masked_uri(uri: str) -> str:
    if "@" not in uri or "://" not in uri:
        return uri
    scheme, rest = uri.split("://", 1)
    credentials, host = rest.rsplit("@", 1)
    user = credentials.split(":", 1)[0]
    return f"{scheme}://{user}:***@{host}"


def seed_admin(app: Flask) -> None:
    """Create the initial admin account when it does not exist yet."""
    from .models import User

    username = app.config.get("ADMIN_USERNAME", "admin")
    if User.query.filter_by(username=username).first():
        return

    admin = User(
        username=username,
        password_hash=generate_password_hash(app.config.get("ADMIN_PASSWORD", "admin")),
        role=app.config.get("PRIVILEGED_ROLE", "admin"),
    )
    db.session.add(admin)
    db.session.commit()
    app.logger.info(f"Admin user created: {username}")


def init_db(app: Flask) -> None:
    with app.app_context():
        db.create_all()
        if app.config.get("SEED_ADMIN", True):
            seed_admin(app)


def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)

    app.config.from_object(Config)
    if config_object is None:
        app.config.from_envvar("APP_SETTINGS", silent=True)
    elif isinstance(config_object, dict):
        app.config.from_mapping(config_object)
    else:
        app.config.from_object(config_object)

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))

    uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if uri.startswith("sqlite:///") and ":memory:" not in uri:
        os.makedirs(os.path.dirname(uri[len("sqlite:///"):]) or ".", exist_ok=True)
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)

    db.init_app(app)
    app.logger.info(f"Database configured: {_masked_uri(uri)}")
    app.logger.info(f"Uploads stored in {app.config['UPLOAD_FOLDER']}")

    # Allow the dashboard to talk to the API from another origin
    CORS(app,
         resources={r"/api/*": {"origins": "*"}},
         allow_headers=["Content-Type", "Authorization"],
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )

    register_error_handlers(app)
    register_routes(app)

    if os.path.isdir(app.config.get("FRONTEND_DIST") or ""):
        app.logger.info(f"Serving frontend from {app.config['FRONTEND_DIST']}")

    init_db(app)

    return app
