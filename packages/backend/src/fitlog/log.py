"""structlog configuration.

Learn: Every module does `logger = structlog.get_logger()` and logs
dotted event names with key/value context:

    logger.warning("fitlog.auth.token_rejected", scope=scope)

configure_logging() runs once at startup. Development gets the colored
console renderer; anything else gets one JSON object per line. The
contextvars processor merges request-scoped values (request_id, bound
by RequestIdMiddleware) into every entry.
"""

import logging

import structlog

from fitlog.config import settings


def configure_logging(level: str | None = None, json: bool | None = None) -> None:
    """Configure structlog for the process."""
    level_name = (level or settings.log_level).upper()
    use_json = settings.log_json if json is None else json

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if use_json:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        # ConsoleRenderer formats exceptions itself
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level_name)
        ),
        cache_logger_on_first_use=True,
    )
