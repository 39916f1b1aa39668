"""Structured logging for Colosseum.

Everything logs through structlog key-value events. Output always goes to
stderr: stdout belongs to the rendered fighters and battles of the CLI.

Example:
    >>> from colosseum.core.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Battle run", matchup="Dummy vs Shadow", turns=10)
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import Processor


if TYPE_CHECKING:
    from structlog.types import EventDict, WrappedLogger

    from colosseum.core.config import Settings


def plain_enums(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Replace enum members (sides, phases, actions) by their values.

    Keeps console and JSON output identical for ``Side.A`` and ``"A"``.
    """
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def configure_logging(*, level: str = "INFO", json_format: bool = False) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        level: The logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, emit one JSON object per line.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        plain_enums,
    ]

    if json_format:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer(colors=False)]

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(level=numeric_level, stream=sys.stderr, force=True)


def configure_from_settings(settings: Settings) -> None:
    """Configure logging from the ``log_level`` and ``json_logs`` settings."""
    configure_logging(level=settings.log_level, json_format=settings.json_logs)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)


@contextmanager
def battle_context(battle_id: str, **extra: Any) -> Iterator[None]:
    """Tag every log line inside the block with the battle id.

    Args:
        battle_id: Identifier of the battle being run.
        **extra: Further key-value pairs to bind for the block.

    Example:
        >>> with battle_context("battle_1718000000000000000"):
        ...     logger.info("Battle run")
    """
    with structlog.contextvars.bound_contextvars(battle_id=battle_id, **extra):
        yield


__all__ = [
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "battle_context",
    "plain_enums",
]
