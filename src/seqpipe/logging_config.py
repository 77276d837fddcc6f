"""
Logging Configuration for seqpipe.

Provides centralized logger setup for pipeline stage tracing.
Stage events go to stderr and, when enabled, to a trace file.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

TRACE_LOGGER_NAME = "seqpipe.trace"
TRACE_LOG_FILE = "trace.log"

_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


# Log directory priority:
# 1. SEQPIPE_LOG_DIR (explicit)
# 2. SEQPIPE_PROJECT_ROOT/.seqpipe (if set)
# 3. CWD/.seqpipe (fallback)
def _get_log_directory() -> Path:
    """Get the log directory path."""
    log_dir = os.getenv("SEQPIPE_LOG_DIR")
    if not log_dir:
        project_root = os.getenv("SEQPIPE_PROJECT_ROOT")
        if project_root:
            log_dir = str(Path(project_root) / ".seqpipe")
        else:
            log_dir = str(Path.cwd() / ".seqpipe")
    return Path(log_dir)


def _ensure_log_directory() -> Path:
    """Ensure log directory exists and return its path."""
    log_dir = _get_log_directory()
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def is_file_logging_enabled() -> bool:
    """File logging is opt-in: set SEQPIPE_DEBUG_LOG to a non-empty value."""
    return bool(os.getenv("SEQPIPE_DEBUG_LOG"))


def _create_file_handler(log_filename: str) -> Optional[logging.FileHandler]:
    """
    Create a file handler for the specified log file.

    Args:
        log_filename: Name of the log file (e.g., 'trace.log')

    Returns:
        Configured FileHandler, or None if file logging is disabled
        or the log directory cannot be created
    """
    if not is_file_logging_enabled():
        return None

    try:
        log_path = _ensure_log_directory() / log_filename
        handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
    except OSError:
        return None
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    return handler


class FlushingStreamHandler(logging.StreamHandler):
    """StreamHandler that flushes after every emit.

    ::: This is-in-layer Infrastructure-Layer.
    ::: This is a handler.
    ::: This is stateless.
    """
    def emit(self, record):
        super().emit(record)
        self.flush()


def _create_stderr_handler() -> logging.StreamHandler:
    """Create a stderr handler for console output with auto-flush."""
    handler = FlushingStreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    return handler


_stderr_suppressed = False
_dependent_loggers = set()  # names passed to configure_logger_for_trace


def is_stderr_suppressed() -> bool:
    """True while stderr logging is suppressed."""
    return _stderr_suppressed


def get_trace_logger() -> logging.Logger:
    """
    Get the trace logger for pipeline stage events.

    Output goes to stderr and, when SEQPIPE_DEBUG_LOG is set,
    to .seqpipe/trace.log.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(TRACE_LOGGER_NAME)

    # Only configure once
    if not logger.handlers:
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        file_handler = _create_file_handler(TRACE_LOG_FILE)
        if file_handler:
            logger.addHandler(file_handler)

        stderr_handler = _create_stderr_handler()
        if _stderr_suppressed:
            stderr_handler.setLevel(logging.CRITICAL + 1)
        logger.addHandler(stderr_handler)

        for name in _dependent_loggers:
            _attach_handlers(logging.getLogger(name), logger.handlers)

    return logger


def _attach_handlers(logger: logging.Logger, handlers) -> None:
    for handler in handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)


def configure_logger_for_trace(logger_name: str) -> logging.Logger:
    """
    Configure a logger to also write wherever the trace logger writes.

    Args:
        logger_name: Name of the logger to configure (e.g., __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.DEBUG)  # Enable all log levels
    _dependent_loggers.add(logger_name)
    _attach_handlers(logger, get_trace_logger().handlers)
    return logger


def _stream_handlers():
    for handler in get_trace_logger().handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            yield handler


def suppress_stderr_logging():
    """
    Suppress stderr logging for the trace logger.

    File logging continues to work normally.
    """
    global _stderr_suppressed
    _stderr_suppressed = True
    for handler in _stream_handlers():
        handler.setLevel(logging.CRITICAL + 1)  # Effectively disable


def restore_stderr_logging():
    """Restore stderr logging for the trace logger."""
    global _stderr_suppressed
    _stderr_suppressed = False
    for handler in _stream_handlers():
        handler.setLevel(logging.DEBUG)


def reset_trace_logger():
    """Close and detach all trace handlers so the next call reconfigures them.

    Handlers are also detached from loggers set up by
    configure_logger_for_trace; they get the new ones once the trace
    logger is configured again.
    """
    logger = logging.getLogger(TRACE_LOGGER_NAME)
    for handler in logger.handlers[:]:
        for name in _dependent_loggers:
            logging.getLogger(name).removeHandler(handler)
        handler.close()
        logger.removeHandler(handler)
