"""
Logging configuration for the credential service.

Health probes are dropped from the access log, the secret synchronizer gets
its own logger so poll failures can be raised in verbosity independently,
and per-request httpx lines from cluster polling are kept at WARNING.
"""

import logging
import logging.config
from typing import Any, Dict, Optional

HEALTH_PATH = "/healthz"
SYNC_LOGGER = "manutara.modules.sync"


class HealthCheckFilter(logging.Filter):
    """Drops GET /healthz lines from the uvicorn access log."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "uvicorn.access":
            message = record.getMessage()
            if HEALTH_PATH in message and "GET" in message:
                return False
        return True


def get_logging_config(level: str = "INFO", sync_level: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the dictConfig for the service.

    Args:
        level: Level for the service and uvicorn loggers
        sync_level: Level for the secret synchronizer (defaults to level)
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {
                "()": HealthCheckFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "access": {
                "format": "%(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout"
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter"]
            }
        },
        "loggers": {
            "uvicorn": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "uvicorn.error": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "uvicorn.access": {
                "handlers": ["access"],
                "level": level,
                "propagate": False
            },
            "manutara": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            SYNC_LOGGER: {
                "handlers": ["default"],
                "level": sync_level or level,
                "propagate": False
            },
            "httpx": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            }
        },
        "root": {
            "level": level,
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO", sync_level: Optional[str] = None) -> None:
    logging.config.dictConfig(get_logging_config(level, sync_level))
