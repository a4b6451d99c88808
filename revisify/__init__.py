# revisify/__init__.py

import logging

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .extensions import db, cors, init_redis
from .utils.error_handler import register_error_handlers
from .routes.auth_routes import auth_bp
from .routes.core_routes import core_bp
from .routes.project_routes import project_bp
from .routes.share_routes import share_bp
from .routes.subscription_routes import subscription_bp
from .routes.waitlist_routes import waitlist_bp
from .routes.webhook_routes import webhook_bp


def create_app(config_class=None) -> Flask:
    if config_class is None:
        config_class = Config
        config_class.validate()

    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # Initialize extensions
    cors.init_app(app, origins=app.config.get("CORS_ORIGINS", "*"))
    db.init_app(app)
    init_redis(app)

    # Fix proxy headers
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)

    register_error_handlers(app)

    # Register blueprints
    app.register_blueprint(core_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(project_bp, url_prefix="/projects")
    app.register_blueprint(share_bp, url_prefix="/share")
    app.register_blueprint(subscription_bp, url_prefix="/subscription")
    app.register_blueprint(webhook_bp, url_prefix="/webhooks")
    app.register_blueprint(waitlist_bp, url_prefix="/waitlist")

    # Create tables if not exists
    with app.app_context():
        from . import models  # noqa: F401
        db.create_all()

    return app
