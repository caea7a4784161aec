"""Logging helpers.

Library modules obtain loggers via :func:`logging.getLogger` with their module
name.  The package root logger carries a :class:`logging.NullHandler` so that
nothing is emitted unless the host application configures logging.  The CLI
calls :func:`configure_logging` to attach a stderr handler.
"""

from __future__ import annotations

import logging

__all__ = ["PACKAGE_LOGGER", "get_logger", "configure_logging"]

PACKAGE_LOGGER = "personid"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the package namespace."""

    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


def configure_logging(verbose: bool = False) -> None:
    """Attach a stderr handler to the package logger.

    Calling the function repeatedly does not stack handlers.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in logger.handlers:
        if getattr(handler, "_personid_cli", False):
            handler.setLevel(logger.level)
            return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    handler.setLevel(logger.level)
    handler._personid_cli = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
