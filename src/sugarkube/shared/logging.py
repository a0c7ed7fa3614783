"""Logging for sugarkube.

Everything logs through structlog on top of the standard library. Output
goes to stderr so stdout stays free for command results. Log lines are
rendered for humans unless --log-json is given; a log file never gets
colour codes.
"""

import logging
import sys
from pathlib import Path

import structlog

LOG_LEVELS = ["debug", "info", "warning", "error", "critical"]
DEFAULT_LOG_LEVEL = "warning"


def _handler(log_file: str | Path | None) -> logging.Handler:
    if log_file:
        return logging.FileHandler(str(log_file))
    return logging.StreamHandler(sys.stderr)


def _renderer(json_output: bool, colors: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=colors)


def configure_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_file: str | Path | None = None,
    json_output: bool = False,
) -> None:
    """Configure standard logging and structlog.

    Called by the root command group before any subcommand runs.

    Args:
        level: One of LOG_LEVELS
        log_file: Write logs to this file instead of stderr
        json_output: Render each log line as a JSON object
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.WARNING

    handler = _handler(log_file)
    handler.setLevel(log_level)
    logging.basicConfig(level=log_level, handlers=[handler], format="%(message)s", force=True)

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_output:
        processors.append(structlog.processors.format_exc_info)
    processors.append(_renderer(json_output, colors=not log_file and sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str, **context) -> structlog.stdlib.BoundLogger:
    """Get a logger, optionally bound to some context.

    Args:
        name: Logger name (typically __name__)
        **context: Key/values added to every line it logs

    Returns:
        structlog logger
    """
    logger = structlog.get_logger(name)
    return logger.bind(**context) if context else logger
