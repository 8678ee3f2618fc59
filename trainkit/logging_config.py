"""Minimal structured logging configuration using structlog.

Strategy: log only what matters when a training run goes wrong.
- Run lifecycle events (dataset loaded, fit started/finished, artifact written)
- Errors and warnings
- Output goes to stderr; stdout is reserved for results (``--json``)
"""

import logging
import sys

import structlog


def setup_logging(level: str = "WARNING", json_format: bool = False) -> structlog.stdlib.BoundLogger:
    """Configure application logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: JSON output for machines, plain text for humans

    Returns:
        Configured structlog logger instance.
    """
    # Shared processors for all outputs
    shared_processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if json_format:
        renderer: structlog.typing.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure stdlib logging handler
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper())

    return structlog.get_logger("trainkit")


def get_logger() -> structlog.stdlib.BoundLogger:
    """Get the application logger."""
    return structlog.get_logger("trainkit")
