"""Centralized logging configuration for the blossom pipeline.

Every pipeline logger lives under the ``blossom-pipeline`` namespace. Only
the namespace root carries a handler; component loggers such as
``blossom-pipeline.sanitizer`` propagate to it, so one level setting governs
the whole package. Records emitted while an upload run is active carry that
run's id (see :func:`bind_run`), including records from worker threads and
concurrent tasks started by the run.
"""

import contextvars
import logging
import os
import sys
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Union

ROOT_LOGGER_NAME = "blossom-pipeline"
NO_RUN = "-"

FORMATS: Dict[str, str] = {
    "structured": (
        "%(asctime)s | %(name)s | %(levelname)-8s | run=%(run_id)s | "
        "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
    ),
    "simple": "%(asctime)s - %(name)s - %(levelname)s - [%(run_id)s] %(message)s",
}

_current_run: contextvars.ContextVar[str] = contextvars.ContextVar(
    "blossom_pipeline_run_id", default=NO_RUN
)


class RunContextFilter(logging.Filter):
    """Stamp each record with the id of the upload run that emitted it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _current_run.get()
        return True


@contextmanager
def bind_run(run_id: str) -> Iterator[None]:
    """Attribute log records emitted inside the block to ``run_id``."""
    token = _current_run.set(run_id)
    try:
        yield
    finally:
        _current_run.reset(token)


def current_run_id() -> str:
    return _current_run.get()


def _resolve_level(level: Optional[Union[str, int]]) -> int:
    if isinstance(level, int):
        return level
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    resolved = getattr(logging, name, logging.INFO)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Optional[Union[str, int]] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Configure a logger with a stdout handler.

    Args:
        name: Logger name (defaults to the package namespace root)
        level: Level name or number (defaults to LOG_LEVEL, then INFO)
        format_type: "structured" or "simple"; LOG_FORMAT overrides it

    Returns:
        The configured logger, which does not propagate further
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        format_name = os.getenv("LOG_FORMAT", format_type).lower()
        handler.setFormatter(
            logging.Formatter(
                FORMATS.get(format_name, FORMATS["simple"]),
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        handler.addFilter(RunContextFilter())
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def set_level(level: Optional[Union[str, int]]) -> None:
    """Change the level of every pipeline logger at once."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(_resolve_level(level))


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a pipeline logger.

    Component names such as "sanitizer" become children of the namespace
    root and inherit its handler and level.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        setup_logger()
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return root.getChild(name)


# Create default logger instance
logger = setup_logger()
