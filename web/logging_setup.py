import logging
import sys

from flask import Flask


def configure_logging(app: Flask, level: str = "INFO") -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if not any(isinstance(handler, logging.StreamHandler) for handler in root_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        root_logger.addHandler(handler)

    # Let app.logger records reach the root handler instead of Flask's default one
    app.logger.handlers.clear()
    app.logger.propagate = True
    app.logger.setLevel(level)
