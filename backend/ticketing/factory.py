"""Application factory."""

from __future__ import annotations

from flask import Flask

from ticketing.core.config import BaseConfig, get_config
from ticketing.core.logger import configure_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """
    Build the ticketing API.

    :param config: Config object or import path; defaults to the class
        selected by ``APP_ENV``.
    :param instance_relative_config: Also read ``instance/<filename>`` when present.
    :param instance_config_filename: Instance config file name.
    :returns: Configured application with the auth service registered.
    :rtype: flask.Flask
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)
    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from ticketing import api, cli
    from ticketing.core import edge, errors, extensions, logger
    from ticketing.infra import wiring

    # order matters: the auth service needs the extensions, routes need the service
    for init in (
        edge.init_app,
        extensions.init_app,
        logger.init_app,
        wiring.init_app,
        api.init_app,
        errors.init_app,
        cli.init_app,
    ):
        init(app)

    return app
