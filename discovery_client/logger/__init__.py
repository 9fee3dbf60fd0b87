"""
Structured logging for the discovery client.

This module provides:
- Structured logging with JSON or console output
- A process-default logger used when a client is built without one
- Shared log keys for dispatch events
- Exception formatting for failed operations
"""

import logging
import logging.config
import sys
import time
import traceback
from collections.abc import Iterable

import structlog
from pythonjsonlogger.json import JsonFormatter

from ..config import ClientConfig, LogLevel
from ..exceptions import ConfigurationError

LOG_KEY_SERVICE = "service"
LOG_KEY_IPS = "ips"
LOG_KEY_IP = "ip"
LOG_KEY_PORT = "port"


class TimestampProcessor:
    """Processor to add timestamps to log records."""

    def __call__(self, logger, method_name, event_dict):
        event_dict["timestamp"] = time.time()
        return event_dict


class ClientInfoProcessor:
    """Processor to add the client identity to log records."""

    def __init__(self, client_name: str, client_version: str):
        self.client_name = client_name
        self.client_version = client_version

    def __call__(self, logger, method_name, event_dict):
        event_dict["client_name"] = self.client_name
        event_dict["client_version"] = self.client_version
        return event_dict


class ExceptionProcessor:
    """Processor to format exceptions in log records."""

    def __call__(self, logger, method_name, event_dict):
        exc_info = event_dict.pop("exc_info", None)
        if exc_info:
            if exc_info is True:
                exc_info = sys.exc_info()

            if exc_info[0] is not None:
                event_dict["exception"] = {
                    "type": exc_info[0].__name__,
                    "message": str(exc_info[1]),
                    "traceback": "".join(traceback.format_tb(exc_info[2]))
                    if exc_info[2]
                    else "",
                }
        return event_dict


class LogConfig:
    """Configuration class for logging setup."""

    def __init__(
        self,
        client_name: str = "discovery_client",
        client_version: str = "0.1.0",
        level: LogLevel = LogLevel.INFO,
        format_type: str = "json",
        log_file: str | None = None,
    ):
        self.client_name = client_name
        self.client_version = client_version
        self.level = level
        self.format_type = format_type
        self.log_file = log_file

    @classmethod
    def from_client_config(cls, config: ClientConfig, **kwargs) -> "LogConfig":
        """Build logging settings from a client's level and format."""
        return cls(level=config.log_level, format_type=config.log_format, **kwargs)


def build_processors(config: LogConfig) -> list:
    """Build the structlog processor chain for the given configuration."""
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        TimestampProcessor(),
        ClientInfoProcessor(config.client_name, config.client_version),
        ExceptionProcessor(),
    ]

    if config.format_type == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def setup_logging(config: LogConfig) -> None:
    """
    Setup structured logging with the given configuration.

    Args:
        config: LogConfig instance with logging configuration
    """
    structlog.configure(
        processors=build_processors(config),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    formatter = "json" if config.format_type == "json" else "standard"
    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": JsonFormatter,
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": config.level.value,
                "formatter": formatter,
                "stream": sys.stdout,
            },
        },
        "loggers": {
            "": {
                "handlers": ["console"],
                "level": config.level.value,
                "propagate": False,
            },
        },
    }

    if config.log_file:
        logging_config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": config.level.value,
            "formatter": formatter,
            "filename": config.log_file,
            "maxBytes": 10 * 1024 * 1024,  # 10MB
            "backupCount": 5,
        }
        logging_config["loggers"][""]["handlers"].append("file")

    try:
        logging.config.dictConfig(logging_config)
    except (ValueError, TypeError, AttributeError, ImportError) as e:
        raise ConfigurationError(f"Failed to configure logging: {e}")


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name, typically __name__

    Returns:
        structlog bound logger
    """
    return structlog.get_logger(name)


def format_ips(addresses: Iterable[str]) -> str:
    """Render resolved addresses as a single comma separated field."""
    return ",".join(addresses)


__all__ = [
    "LOG_KEY_IP",
    "LOG_KEY_IPS",
    "LOG_KEY_PORT",
    "LOG_KEY_SERVICE",
    "LogConfig",
    "format_ips",
    "get_logger",
    "setup_logging",
]
