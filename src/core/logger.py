from __future__ import annotations

import logging
import os
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

APP_LOGGER_NAME = "TimeMask"
LOG_FILE_NAME = "app.log"

_QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}

_bridge_lock = threading.Lock()
_bridge_logger: logging.Logger | None = None
_previous_qt_handler = None
_bridge_installed = False


def get_logger(suffix: str = "") -> logging.Logger:
    """Return the application logger or one of its children (``TimeMask.<suffix>``)."""
    name = f"{APP_LOGGER_NAME}.{suffix}" if suffix else APP_LOGGER_NAME
    return logging.getLogger(name)


def _forward_qt_message(mode, context, message: str) -> None:
    logger = _bridge_logger
    if logger is None:
        return

    category = str(getattr(context, "category", "") or "").strip()
    tag = f"[Qt:{category}]" if category else "[Qt]"
    logger.log(_QT_LEVELS.get(mode, logging.INFO), "%s %s", tag, message)

    if _previous_qt_handler is not None:
        _previous_qt_handler(mode, context, message)


def _install_qt_bridge(logger: logging.Logger) -> None:
    global _bridge_logger, _previous_qt_handler, _bridge_installed
    with _bridge_lock:
        _bridge_logger = logger
        if _bridge_installed:
            return
        _previous_qt_handler = qInstallMessageHandler(_forward_qt_message)
        _bridge_installed = True


def _has_file_handler(logger: logging.Logger, log_path: Path) -> bool:
    target = os.path.abspath(log_path)
    return any(
        isinstance(handler, RotatingFileHandler) and handler.baseFilename == target
        for handler in logger.handlers
    )


def _has_console_handler(logger: logging.Logger) -> bool:
    return any(type(handler) is logging.StreamHandler for handler in logger.handlers)


def setup_logger(log_dir: Path, debug: bool = False) -> logging.Logger:
    """
    Configure the rotating application log under ``log_dir``.

    Handlers already attached by someone else are left alone; the file and
    console handlers are each attached once.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    logger = get_logger()
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False

    log_path = log_dir / LOG_FILE_NAME
    if not _has_file_handler(logger, log_path):
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    if debug and not _has_console_handler(logger):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(console_handler)

    _install_qt_bridge(logger)
    return logger
