from __future__ import annotations

import logging
import sys

import structlog

from projectflow.core.config import settings


def configure_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """
    Route stdlib logging and structlog through the same processors.
    JSON lines when LOG_JSON is on (deployments), console rendering otherwise.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    as_json = settings.LOG_JSON if json_output is None else json_output

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=getattr(logging, level_name, logging.INFO))

    renderer = structlog.processors.JSONRenderer() if as_json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
