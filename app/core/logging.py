import logging
import logging.config
from pathlib import Path
from app.core.config import settings

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG",
            "formatter": "default",
            "stream": "ext://sys.stdout"
        }
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"]
    },
    "loggers": {
        "app": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False
        },
        "apscheduler": {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": False
        },
        "uvicorn.access": {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": False
        }
    }
}

FILE_HANDLERS = {
    "file": {
        "class": "logging.handlers.RotatingFileHandler",
        "level": "INFO",
        "formatter": "default",
        "filename": "logs/app.log",
        "maxBytes": 10485760,
        "backupCount": 5
    },
    "error_file": {
        "class": "logging.handlers.RotatingFileHandler",
        "level": "ERROR",
        "formatter": "default",
        "filename": "logs/error.log",
        "maxBytes": 10485760,
        "backupCount": 5
    }
}

def build_logging_config(level: str = settings.LOG_LEVEL, log_to_file: bool = settings.LOG_TO_FILE) -> dict:
    config = {
        **LOGGING_CONFIG,
        "handlers": dict(LOGGING_CONFIG["handlers"]),
        "root": dict(LOGGING_CONFIG["root"]),
        "loggers": {name: dict(cfg) for name, cfg in LOGGING_CONFIG["loggers"].items()},
    }
    config["loggers"]["app"]["level"] = level.upper()

    if log_to_file:
        Path("logs").mkdir(exist_ok=True)
        config["handlers"].update(FILE_HANDLERS)
        config["root"]["handlers"] = ["console", "file", "error_file"]
        config["loggers"]["app"]["handlers"] = ["console", "file", "error_file"]

    return config

def configure_logging():
    logging.config.dictConfig(build_logging_config())
