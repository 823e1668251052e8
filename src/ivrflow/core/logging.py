#!/usr/bin/env python3

import logging
import logging.config
from pythonjsonlogger import jsonlogger


def setup_logging(level: str = "INFO", stream: str = "ext://sys.stdout"):
    """Setup JSON logging configuration

    Args:
        level: Root log level name (e.g. "INFO", "DEBUG")
        stream: Handler stream reference (stdout by default)
    """
    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": jsonlogger.JsonFormatter,
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s %(document)s"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": stream
            }
        },
        "loggers": {
            "": {
                "handlers": ["console"],
                "level": level.upper(),
                "propagate": False
            },
            "ivrflow": {
                "handlers": ["console"],
                "level": level.upper(),
                "propagate": False
            }
        }
    }

    logging.config.dictConfig(logging_config)
