"""structlog setup.

Learn: Every module just does `logger = structlog.get_logger()` and logs
dotted event names with key-value context:

    logger.info("todos.created", todo_id=todo.id)

configure_logging() decides how those events are rendered: a colored
console in development, one JSON object per line everywhere else. The
request id bound by RequestIdMiddleware is merged into every entry.
"""

import logging

import structlog

from taskboard.config import Settings


def configure_logging(config: Settings) -> None:
    level = logging.DEBUG if config.debug else logging.INFO
    if config.log_json or config.environment != "development":
        # JSON needs tracebacks flattened into a string field first
        renderers = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            *renderers,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
