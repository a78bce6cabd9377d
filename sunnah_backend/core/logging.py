"""Logging configuration module."""

from logging import (
    CRITICAL,
    DEBUG,
    ERROR,
    INFO,
    WARNING,
    Handler,
    Logger,
    StreamHandler,
    getLogger,
)
from typing import cast

import structlog
from structlog import contextvars, dev, processors, stdlib
from structlog.processors import JSONRenderer, TimeStamper, dict_tracebacks
from structlog.stdlib import BoundLogger

# Define log levels
LOG_LEVELS: dict[str, int] = {
    "debug": DEBUG,
    "info": INFO,
    "warning": WARNING,
    "error": ERROR,
    "critical": CRITICAL,
}

# Loggers that are too chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def resolve_level(level: str | int) -> int:
    """Translate a level name into a logging level, defaulting to INFO."""
    if isinstance(level, int):
        return level
    return LOG_LEVELS.get(level.lower(), INFO)


def configure_logging(
    level: str | int = INFO,
    json_logs: bool = True,
    testing: bool = False,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level name or number
        json_logs: Render log lines as JSON instead of console output
        testing: Whether the application is running in test mode
    """
    log_level = resolve_level(level)

    root_logger: Logger = getLogger()
    root_logger.setLevel(log_level)

    app_logger: Logger = getLogger("sunnah_backend")
    app_logger.setLevel(log_level)

    handler: Handler = StreamHandler()
    handler.setLevel(log_level)

    shared_processors = [
        contextvars.merge_contextvars,
        stdlib.add_logger_name,
        stdlib.add_log_level,
        stdlib.PositionalArgumentsFormatter(),
        TimeStamper(fmt="%Y-%m-%d %H:%M:%S.%f"),
        dict_tracebacks,
    ]

    use_json = json_logs and not testing

    structlog.configure(
        processors=[
            stdlib.filter_by_level,
            *shared_processors,
            processors.format_exc_info,
            JSONRenderer() if use_json else processors.KeyValueRenderer(),
        ],
        context_class=dict,
        logger_factory=stdlib.LoggerFactory(),
        wrapper_class=stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # stdlib records (uvicorn, httpx, module loggers) share the same rendering
    formatter = stdlib.ProcessorFormatter(
        processor=JSONRenderer() if use_json else dev.ConsoleRenderer(),
        foreign_pre_chain=shared_processors,
    )
    handler.setFormatter(formatter)

    # Clear existing handlers to prevent duplicates
    root_logger.handlers = []
    app_logger.handlers = []
    app_logger.propagate = False

    root_logger.addHandler(handler)
    app_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        getLogger(name).setLevel(WARNING)


def get_logger(name: str | None = None) -> BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Optional logger name

    Returns:
        A structured logger instance.
    """
    return cast(BoundLogger, structlog.get_logger(name))


def get_request_logger(
    correlation_id: str | None = None, name: str | None = None
) -> BoundLogger:
    """Get a logger bound to a request's correlation ID.

    Args:
        correlation_id: Optional correlation ID to bind to logger
        name: Optional logger name

    Returns:
        Configured logger with request context
    """
    logger: BoundLogger = get_logger(name)
    if correlation_id:
        logger = logger.bind(correlation_id=correlation_id)
    return logger
