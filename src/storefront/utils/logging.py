"""Logging for the storefront.

Records flow through the standard library (console plus two rotating files
under ``LOG_DIR``) and are shaped by structlog. Every event carries the
service name and environment; request-scoped values such as the request id
and user id come from structlog's contextvars.

Environment:
    LOG_LEVEL    explicit level, overrides the per-environment default
    LOG_DIR      directory for the rotating files (default ``logs``)
    ENVIRONMENT  development | test | staging | production
                 (falls back to ``PROTEAN_ENV``)
"""

import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

SERVICE_NAME = "storefront"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

_DEFAULT_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_JSON_ENVIRONMENTS = ("production", "staging")

# Third-party loggers that are only interesting when they fail
_QUIET_LOGGERS = ("protean", "urllib3", "asyncio", "redis", "httpx")


@dataclass(frozen=True)
class LogSettings:
    environment: str
    level: str
    log_dir: Path

    @property
    def renders_json(self) -> bool:
        return self.environment in _JSON_ENVIRONMENTS

    @classmethod
    def from_env(cls, environ=None) -> "LogSettings":
        environ = os.environ if environ is None else environ
        environment = (environ.get("ENVIRONMENT") or environ.get("PROTEAN_ENV") or "development").lower()
        level = environ.get("LOG_LEVEL") or _DEFAULT_LEVELS.get(environment, "INFO")
        return cls(
            environment=environment,
            level=level.upper(),
            log_dir=Path(environ.get("LOG_DIR") or "logs"),
        )


def _rotating_file(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(settings: LogSettings) -> None:
    settings.log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(settings.level)

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.level)
    root_logger.handlers = [
        console,
        _rotating_file(settings.log_dir / f"{SERVICE_NAME}.log", settings.level),
        _rotating_file(settings.log_dir / f"{SERVICE_NAME}_error.log", logging.ERROR),
    ]

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def service_stamp(environment: str):
    """structlog processor adding ``service`` and ``env`` to every event."""

    def _stamp(logger, method_name, event_dict):
        event_dict.setdefault("service", SERVICE_NAME)
        event_dict.setdefault("env", environment)
        return event_dict

    return _stamp


def build_processors(settings: LogSettings) -> list:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        service_stamp(settings.environment),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.renders_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=5),
            )
        )
    return processors


def configure_logging(settings: LogSettings | None = None) -> LogSettings:
    """Configure stdlib handlers and structlog; returns the settings used."""
    settings = settings or LogSettings.from_env()
    setup_stdlib_logging(settings)
    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return settings


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def add_context(**kwargs: Any) -> None:
    """Bind values into every log line emitted by the current request."""
    structlog.contextvars.bind_contextvars(**{key: value for key, value in kwargs.items() if value is not None})


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
