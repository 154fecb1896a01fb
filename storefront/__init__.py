import logging

from flask import Flask

from storefront import config as default_config
from storefront.errors import register_error_handlers
from storefront.storage import init_storage
from storefront.uploads import init_uploads


def create_app(config=None):
    app = Flask(
        __name__,
        template_folder="templates",
        static_folder="static"
    )

    # -----------------------------
    # APP CONFIG
    # -----------------------------
    app.config.update(default_config.defaults())
    if config:
        app.config.update(config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # -----------------------------
    # SECRET KEY (MANDATORY)
    # -----------------------------
    if not app.config.get("SECRET_KEY"):
        raise RuntimeError("SECRET_KEY not set")

    # -----------------------------
    # STORAGE + UPLOADS
    # -----------------------------
    init_storage(app)
    init_uploads(app)

    register_error_handlers(app)

    # -----------------------------
    # BLUEPRINTS
    # -----------------------------
    from storefront.routes import main
    app.register_blueprint(main)

    from storefront.admin_routes import admin
    app.register_blueprint(admin)

    from storefront.api import api
    app.register_blueprint(api)

    return app
