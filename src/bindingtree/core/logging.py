# src/bindingtree/core/logging.py
"""Structured logging configuration for bindingtree.

Compilation is a pure transformation, so logging is the only place
diagnostics leave the core besides the returned CompilationResult. The
editor integration and the CLI both call configure_logging() once.

Every event carries the name of the module that emitted it ("logger"),
which identifies the compiler stage, and whatever graph_context() bound
for the graph being compiled. structlog and stdlib records share one
ProcessorFormatter, so dynaconf's stdlib logging renders like our own.
"""

import logging
import sys
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

# Dynaconf reports every settings file it looks for at DEBUG.
QUIET_LOGGERS: tuple[str, ...] = ("dynaconf",)


def _remove_internal_fields(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Drop ProcessorFormatter bookkeeping keys from the rendered event.

    ProcessorFormatter always adds _record and _from_structlog, so del
    (not pop) is used: a KeyError means the integration is broken.
    """
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def _renderer(json_output: bool, stream: TextIO) -> list[Any]:
    if json_output:
        return [
            _remove_internal_fields,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        _remove_internal_fields,
        structlog.dev.ConsoleRenderer(colors=stream.isatty()),
    ]


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    quiet_loggers: Sequence[str] = QUIET_LOGGERS,
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and stdlib logging.

    Args:
        json_output: If True, output JSON. If False, human-readable console output.
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        quiet_loggers: stdlib loggers held at WARNING or above whatever the level.
        stream: Destination; sys.stderr (looked up at call time) when omitted,
            keeping stdout free for compiled trees.
    """
    log_level = getattr(logging, level.upper())
    stream = stream if stream is not None else sys.stderr

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=[*shared_processors, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Tests reconfigure logging; cached loggers would keep the old chain.
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        ProcessorFormatter(
            processors=_renderer(json_output, stream),
            foreign_pre_chain=shared_processors,
        )
    )

    root = logging.getLogger()
    root.handlers = []
    root.addHandler(handler)
    root.setLevel(log_level)

    quiet_level = max(log_level, logging.WARNING)
    for logger_name in quiet_loggers:
        logging.getLogger(logger_name).setLevel(quiet_level)


@contextmanager
def graph_context(graph_file: Path | str) -> Iterator[None]:
    """Tag every event logged inside the block with the graph being compiled."""
    with structlog.contextvars.bound_contextvars(graph=str(graph_file)):
        yield


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a bound logger for a module.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Bound structlog logger.
    """
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
