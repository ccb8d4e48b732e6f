"""Centralized logging configuration for log mailer.

Provides the logger factory used by every log mailer module, plus an
optional root configuration with file rotation for the command-line tools.

Features:
    - Dual output: Console (stdout) + File handlers
    - Automatic log file rotation (configurable size and backups)
    - Configurable log levels per module
    - Structured logging with context
    - Credential masking for console output

Note:
    Internal diagnostics are emitted on ``log_mailer.*`` loggers. Do not
    attach a MailHandler to those loggers, or a failing send would try to
    mail its own diagnostics.

Author: Odiseo
Created: 2025-10-18
Version: 2.1.0
"""

import logging
import logging.handlers
import sys
from pathlib import Path

# Global configuration
_ROOT_LOGGER: logging.Logger | None = None
_LOG_DIR = Path(__file__).parent.parent / "logs"
_LOG_FORMAT_DETAILED = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
)
_LOG_FORMAT_SIMPLE = "%(asctime)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Module-level logger configuration
_MODULE_LEVELS = {
    "log_mailer.clients": logging.DEBUG,
    "log_mailer.composer": logging.INFO,
    "log_mailer.templates": logging.INFO,
    "log_mailer.config": logging.INFO,
}


def mask_password(password: str | None) -> str:
    """Mask password for display, showing only first and last char.

    Args:
        password: Password to mask.

    Returns:
        Masked password string.
    """
    if not password:
        return "(not set)"
    if len(password) <= 2:
        return "***"
    return f"{password[0]}{'*' * (len(password) - 2)}{password[-1]}"


def setup_logging(
    log_dir: Path | None = None,
    log_level: str = "INFO",
    file_level: str = "DEBUG",
    console_level: str = "INFO",
    enable_file: bool = True,
    max_size_mb: int = 10,
    backup_count: int = 5,
) -> None:
    """Configure root logger with file and console handlers.

    Intended for the command-line tools. Applications embedding a MailHandler
    usually own the root logger configuration themselves.

    Args:
        log_dir: Directory for log files. Defaults to log_mailer/logs.
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file_level: File handler level (usually DEBUG for comprehensive logging).
        console_level: Console handler level (usually INFO to reduce noise).
        enable_file: Whether to write logs to files.
        max_size_mb: Rotation size of the main log file.
        backup_count: Number of rotated files to keep.

    Example:
        setup_logging(
            log_level="INFO",
            console_level="WARNING",  # Only show warnings and errors on console
            enable_file=False,
        )
    """
    global _ROOT_LOGGER, _LOG_DIR

    if log_dir:
        _LOG_DIR = Path(log_dir)
    else:
        _LOG_DIR = Path(__file__).parent.parent / "logs"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, console_level.upper(), logging.INFO))
    console_handler.setFormatter(
        logging.Formatter(_LOG_FORMAT_SIMPLE, datefmt=_DATE_FORMAT)
    )
    root_logger.addHandler(console_handler)

    if enable_file:
        _LOG_DIR.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            _LOG_DIR / "log_mailer.log",
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(getattr(logging, file_level.upper(), logging.DEBUG))
        file_handler.setFormatter(
            logging.Formatter(_LOG_FORMAT_DETAILED, datefmt=_DATE_FORMAT)
        )
        root_logger.addHandler(file_handler)

        # Errors are duplicated to log_mailer.error.log
        error_handler = logging.handlers.RotatingFileHandler(
            _LOG_DIR / "log_mailer.error.log",
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(
            logging.Formatter(_LOG_FORMAT_DETAILED, datefmt=_DATE_FORMAT)
        )
        root_logger.addHandler(error_handler)

    for module_name, level in _MODULE_LEVELS.items():
        logging.getLogger(module_name).setLevel(level)

    _ROOT_LOGGER = root_logger


def get_logger(name: str, log_level: str | None = None) -> logging.Logger:
    """Get a configured logger instance for a module.

    Args:
        name: Logger name (typically __name__ of calling module).
        log_level: Optional override for logger level (DEBUG, INFO, WARNING, ERROR).

    Returns:
        Logger instance ready for use.

    Example:
        from log_mailer.core.logger import get_logger

        logger = get_logger(__name__)
        logger.debug("Sending mail to ops@example.com using smtp.example.com")
    """
    logger = logging.getLogger(name)

    if log_level:
        logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    return logger


def get_logs_directory() -> Path:
    """Get the logs directory path.

    Returns:
        Path object pointing to the configured logs directory.
    """
    return _LOG_DIR


def log_context(
    operation: str,
    recipient: str | None = None,
    **kwargs,
) -> str:
    """Format a log context string with metadata.

    Args:
        operation: Operation name (e.g., "send", "compose").
        recipient: Rendered recipient list if applicable.
        **kwargs: Additional context key-value pairs.

    Returns:
        Formatted context string for logging.

    Example:
        msg = log_context("send", recipient="ops@example.com", server="mail.local")
        # send | →ops@example.com (server=mail.local)
    """
    context_parts = [operation]

    if recipient:
        context_parts.append(f"→{recipient}")

    context = " | ".join(context_parts)

    if kwargs:
        extra = ", ".join(f"{k}={v}" for k, v in kwargs.items())
        context = f"{context} ({extra})"

    return context
