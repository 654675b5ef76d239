"""Centralized logging setup for WebConvert.

Every ``webconvert.*`` logger feeds one queue. A single background listener
drains it into a rotating log file and, when asked, stderr, so converters
and the engine never block on I/O while a flush slice is running.
"""

import atexit
import logging
import os
import sys
import threading
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import SimpleQueue

ROOT_LOGGER_NAME = "webconvert"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_BACKUPS = 3


class _Sink:
    """The shared queue plus the listener that empties it."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.queue: SimpleQueue | None = None
        self.listener: QueueListener | None = None

    def start(self, handlers: list[logging.Handler]) -> None:
        self.queue = SimpleQueue()
        self.listener = QueueListener(self.queue, *handlers, respect_handler_level=True)
        self.listener.start()
        atexit.register(self.stop)

    def stop(self) -> None:
        if self.listener is not None:
            self.listener.stop()
            self.listener = None


_sink = _Sink()


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, fallback: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return fallback
    try:
        return int(raw)
    except ValueError:
        return fallback


def log_directory() -> Path:
    """Where log files go: $WEBCONVERT_LOG_DIR or ~/.webconvert/logs."""
    configured = os.environ.get("WEBCONVERT_LOG_DIR")
    return Path(configured) if configured else Path.home() / ".webconvert" / "logs"


def _file_handler(level: int, formatter: logging.Formatter) -> logging.Handler | None:
    directory = log_directory()
    try:
        directory.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            directory / "webconvert.log",
            maxBytes=_env_int("WEBCONVERT_LOG_MAX_BYTES", DEFAULT_MAX_BYTES),
            backupCount=_env_int("WEBCONVERT_LOG_BACKUPS", DEFAULT_BACKUPS),
            encoding="utf-8",
        )
    except OSError:
        # Read-only home or similar; carry on without a file sink
        return None
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _sink_handlers(level: int, to_console: bool, to_file: bool) -> list[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = []
    if to_file:
        file_handler = _file_handler(level, formatter)
        if file_handler is not None:
            handlers.append(file_handler)
    if to_console:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(level)
        stderr_handler.setFormatter(formatter)
        handlers.append(stderr_handler)
    return handlers


def setup_logging(
    module_name: str = ROOT_LOGGER_NAME,
    log_level: str = "INFO",
    include_console: bool | None = None,
    include_file: bool = True,
) -> logging.Logger:
    """Attach ``module_name`` to the shared queue sink.

    Module loggers made with ``logging.getLogger(__name__)`` propagate up to
    ``webconvert``, so configuring the root package logger is normally enough.
    Calling this again for an already configured logger only adjusts its level.

    Args:
        module_name: Logger to configure
        log_level: DEBUG, INFO, WARNING or ERROR
        include_console: Mirror records to stderr. None defers to the
            WEBCONVERT_CONSOLE_LOGS environment flag.
        include_file: Write to the rotating file in ``log_directory()``

    """
    logger = logging.getLogger(module_name)
    level = getattr(logging, log_level.upper())
    logger.setLevel(level)
    if logger.handlers:
        return logger

    if include_console is None:
        include_console = _env_flag("WEBCONVERT_CONSOLE_LOGS")
    logger.propagate = False

    with _sink.lock:
        if _sink.listener is None:
            handlers = _sink_handlers(level, include_console, include_file)
            if handlers:
                _sink.start(handlers)

    if _sink.queue is None or _sink.listener is None:
        logger.addHandler(logging.NullHandler())
    else:
        handler = QueueHandler(_sink.queue)
        handler.setLevel(level)
        logger.addHandler(handler)
    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Logger for ``module_name`` with the package sink already running."""
    setup_logging(ROOT_LOGGER_NAME)
    return logging.getLogger(module_name)


__all__ = ["ROOT_LOGGER_NAME", "get_logger", "log_directory", "setup_logging"]
