"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog


def setup_logging(level: str = "info", json_output: bool = True) -> None:
    """Configure structlog for stderr output.

    JSON lines are the default; ``json_output=False`` switches to the
    human-readable console renderer for local runs.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


@contextmanager
def item_context(index: int, resource_id: str = "", resource_type: str = "") -> Iterator[None]:
    """Bind the configuration item being processed to every log line in scope."""
    with structlog.contextvars.bound_contextvars(
        item_index=index,
        resource_id=resource_id,
        resource_type=resource_type,
    ):
        yield
