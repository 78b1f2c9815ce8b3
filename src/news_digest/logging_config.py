import logging

import structlog

from .config import settings


def configure_logging(level: str | None = None) -> None:
    """Route structlog events through stdlib logging as JSON lines.

    Context bound with ``structlog.contextvars.bind_contextvars`` (for
    example the category of the aggregation in flight) is merged into every
    event emitted while it is bound.
    """

    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    logging.basicConfig(level=log_level, format="%(message)s")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


configure_logging()


def get_logger(name: str | None = None):
    if name is None:
        return structlog.get_logger()
    return structlog.get_logger(name)
