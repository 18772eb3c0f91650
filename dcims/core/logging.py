import logging.config
from pathlib import Path

from dcims.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging():
    """Console logging for the service, plus a rotating file when LOG_FILE is set."""

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "dcims",
            "stream": "ext://sys.stdout",
        },
    }
    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "dcims",
            "filename": str(log_path),
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 3,
            "encoding": "utf8",
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "dcims": {"format": LOG_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
            },
            "handlers": handlers,
            "root": {"level": "WARNING", "handlers": list(handlers)},
            "loggers": {
                # request lines come from uvicorn.access through the root handlers
                "dcims": {"level": settings.LOG_LEVEL},
                "uvicorn.access": {"level": "INFO", "handlers": [], "propagate": True},
            },
        }
    )
