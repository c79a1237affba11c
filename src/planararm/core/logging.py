"""
Structured logging configuration for PlanarArm.

Uses structlog (https://www.structlog.org/) so that solver and controller
events carry their context (joint ids, angles, iteration counts) as key/value
pairs instead of being formatted into strings. Console output goes to stderr
so it never mixes with CLI tables; JSON lines can be enabled, and a log file
receives the same lines, for recording simulation runs.

Usage::

    from planararm.core.logging import configure_logging, get_logger

    configure_logging(level="DEBUG")  # Call once at startup
    logger = get_logger(__name__)
    logger.info("solve_finished", outcome="SUCCESS", iterations=12)
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

import structlog

# Events emitted before the stdlib hand-off; rendering happens in the formatter.
_EVENT_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _build_formatter(json_output: bool) -> structlog.stdlib.ProcessorFormatter:
    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    return structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """
    Route structlog events through the stdlib root logger.

    Call once from the entry point; the CLI does it from its global options.
    Calling again replaces the previous handlers.

    Args:
        level: Minimum log level name (DEBUG, INFO, WARNING, ...).
        json_output: Render sorted-key JSON lines instead of console lines.
        log_file: Also append every line to this file (e.g. ``run.jsonl``).
    """
    formatter = _build_formatter(json_output)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        handlers.append(logging.FileHandler(Path(log_file), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=[*_EVENT_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        # module-level loggers must pick up a later reconfiguration
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return the structlog logger for a module name (``__name__``)."""
    return structlog.get_logger(name)
