"""
Centralized logging configuration for the Ostium SDK.

Every component logs through a logger under the ``ostium.`` namespace with a
consistent format. Console output is always on; rotating file output is
enabled with ``OSTIUM_LOG_TO_FILE=1``.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional
from logging.handlers import RotatingFileHandler


# Log levels
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL
}

LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _file_logging_enabled() -> bool:
    return os.getenv("OSTIUM_LOG_TO_FILE", "").strip().lower() in ("1", "true", "yes")


def get_log_dir() -> Path:
    """Directory for log files (``OSTIUM_LOG_DIR`` or ``./logs``)."""
    return Path(os.getenv("OSTIUM_LOG_DIR", "logs"))


def setup_logger(
    name: str,
    log_file: Optional[str] = None,
    level: str = "INFO",
    log_to_console: bool = True,
    log_to_file: Optional[bool] = None
) -> logging.Logger:
    """
    Set up a logger with consistent formatting.

    Args:
        name: Logger name (typically ``ostium.<component>``)
        log_file: File name inside the log directory
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_console: Whether to output to console
        log_to_file: Whether to output to file (defaults to ``OSTIUM_LOG_TO_FILE``)

    Returns:
        Configured logger instance
    """
    # Check environment variable for global log level override
    env_log_level = os.getenv('LOG_LEVEL', '').upper()
    if env_log_level and env_log_level in LOG_LEVELS:
        effective_level = env_log_level
    else:
        effective_level = level.upper()

    if log_to_file is None:
        log_to_file = _file_logging_enabled()

    logger = logging.getLogger(name)
    logger.setLevel(LOG_LEVELS.get(effective_level, logging.INFO))

    # Prevent duplicate handlers; existing ones follow the new level
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(logger.level)
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(LOG_LEVELS.get(effective_level, logging.INFO))
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_to_file and log_file:
        log_dir = get_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)

        # 10 MB per file, two backups
        file_handler = RotatingFileHandler(
            log_dir / log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=2,
            encoding='utf-8'
        )
        file_handler.setLevel(LOG_LEVELS.get(effective_level, logging.INFO))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_signer_logger(signer_name: str, level: str = "INFO") -> logging.Logger:
    """
    Get a logger for a transaction signer.

    Args:
        signer_name: "local" or "fordefi"
        level: Log level

    Logs to: logs/{signer_name}_signer.log
    """
    return setup_logger(
        name=f"ostium.signer.{signer_name}",
        log_file=f"{signer_name}_signer.log",
        level=level
    )


def get_client_logger(level: str = "INFO") -> logging.Logger:
    """
    Get the client logger for trading and vault operations.

    Logs to: logs/client.log
    """
    return setup_logger(
        name="ostium.client",
        log_file="client.log",
        level=level
    )


def set_global_log_level(level: str = "INFO"):
    """
    Reconfigure all existing ``ostium.*`` loggers to the given level.

    Args:
        level: Log level to set (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    for logger_name in list(logging.root.manager.loggerDict):
        if logger_name.startswith("ostium."):
            logger = logging.getLogger(logger_name)
            logger.setLevel(log_level)

            for handler in logger.handlers:
                handler.setLevel(log_level)

    # web3 and urllib3 are chatty at DEBUG
    if level.upper() == "ERROR":
        noisy_loggers = [
            "urllib3",
            "urllib3.connectionpool",
            "requests",
            "web3",
            "web3.providers.HTTPProvider",
            "asyncio"
        ]
        for logger_name in noisy_loggers:
            logging.getLogger(logger_name).setLevel(logging.ERROR)
