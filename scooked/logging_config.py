"""
Logging configuration for the Scooked service.

Uvicorn access lines for the health probe are suppressed; everything under
the ``scooked`` namespace follows LOG_LEVEL.
"""

import logging
import logging.config
from typing import Any, Dict

SERVICE_LOGGER = "scooked"
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error")


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for GET /health."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        message = record.getMessage()
        return not ("GET" in message and "/health" in message)


def _logger(handler: str, level: str) -> Dict[str, Any]:
    return {"handlers": [handler], "level": level, "propagate": False}


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """
    Build a dictConfig mapping.

    Args:
        level: Level for the scooked loggers; uvicorn stays at INFO

    Returns:
        Mapping usable by logging.config.dictConfig and uvicorn's log_config
    """
    loggers = {name: _logger("default", "INFO") for name in UVICORN_LOGGERS}
    loggers["uvicorn.access"] = _logger("access", "INFO")
    loggers[SERVICE_LOGGER] = _logger("default", level)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"health_check_filter": {"()": HealthCheckFilter}},
        "formatters": {
            "default": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter"],
            },
        },
        "loggers": loggers,
        "root": {"level": "INFO", "handlers": ["default"]},
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the logging configuration once at startup."""
    logging.config.dictConfig(get_logging_config(level))
