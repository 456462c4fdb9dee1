"""Logging setup for the TomatoClock application.

Library modules only ever call ``logging.getLogger(__name__)``; handlers
are installed once by the entry point through :func:`configure_logging`.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .settings import APP_SUPPORT_DIR

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_DIR = APP_SUPPORT_DIR / "logs"


def configure_logging(
    level: int = logging.INFO,
    log_dir: Path | None = None,
    console: bool = True,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Attach file (rotating) and console handlers to the package logger.

    Safe to call more than once; handlers are matched by name.
    """
    logger = logging.getLogger("tomatoclock")
    logger.setLevel(level)
    fmt = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    log_dir = log_dir or LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler_name = "tomatoclock:file"
    if not any(h.get_name() == file_handler_name for h in logger.handlers):
        file_handler = RotatingFileHandler(
            filename=log_dir / "tomatoclock.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(fmt)
        file_handler.set_name(file_handler_name)
        logger.addHandler(file_handler)

    console_handler_name = "tomatoclock:console"
    if console and not any(h.get_name() == console_handler_name for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(fmt)
        console_handler.set_name(console_handler_name)
        logger.addHandler(console_handler)

    return logger


def install_excepthook(logger: logging.Logger | None = None) -> None:
    """Log uncaught exceptions instead of letting PyQt abort the process.

    PyQt calls ``qFatal()`` when a slot raises and ``sys.excepthook`` is
    the default one.
    """
    logger = logger or logging.getLogger("tomatoclock")

    def _hook(exc_type, exc_value, exc_tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        logger.error(
            "Unhandled exception", exc_info=(exc_type, exc_value, exc_tb)
        )

    sys.excepthook = _hook


def ensure_excepthook() -> None:
    """Install :func:`install_excepthook` unless a custom hook is already set.

    Qt objects that emit signals call this so a raising slot is logged
    even when the host never ran :func:`configure_logging`.
    """
    if sys.excepthook is sys.__excepthook__:
        install_excepthook()
