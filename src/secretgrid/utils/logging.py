"""Logging helpers shared by the command line front end."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "secretgrid"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger, or a child of it for *name*."""

    if not name or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(verbose: bool = False) -> None:
    """Send package logs to stderr through a ``RichHandler``.

    Only the package logger is touched; the root logger keeps whatever the
    host application configured.
    """

    logger = get_logger()
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


__all__ = ["ROOT_LOGGER_NAME", "configure_logging", "get_logger"]
