"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from authapi.core.config import BaseConfig, get_config
from authapi.core.logger import configure_logging, init_app as init_logging
from authapi.services._shared.errors import ConfigError


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :raises ConfigError: If ``JWT_SECRET_KEY`` is empty or a component
        setting (ledger kind, rate rule) is invalid.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    # A process without a signing secret must not start serving.
    if not app.config.get("JWT_SECRET_KEY"):
        raise ConfigError("JWT_SECRET_KEY must be set")
    if not app.config.get("SECRET_KEY"):
        app.config["SECRET_KEY"] = app.config["JWT_SECRET_KEY"]
    # The algorithm accepted on decode is the one tokens are signed with.
    app.config["JWT_DECODE_ALGORITHMS"] = [app.config["JWT_ALGORITHM"]]
    app.config["JWT_TOKEN_LOCATION"] = ["headers"]

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from authapi.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from authapi.core import container

    container.init_app(app)

    from authapi.core import cors

    cors.init_app(app)

    from authapi.api import init_app as init_api

    init_api(app)

    from authapi.core import errors

    errors.init_app(app)

    return app
