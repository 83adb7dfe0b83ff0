# soapwire/utils/logger.py
"""
Logging configuration for the soapwire package.

All soapwire modules log through module-level loggers below the 'soapwire'
package logger. This module attaches the handlers to that package logger:
a console handler that is always present, and an optional file handler with
its own level. Request and response bodies are logged at DEBUG, so a DEBUG
file handler next to an INFO console is the usual troubleshooting setup.
"""

import logging
from pathlib import Path
from sys import stdout

from .config_loader import LoggingSection

PACKAGE_LOGGER_NAME: str = 'soapwire'

CONSOLE_HANDLER_NAME: str = 'soapwire.console'
FILE_HANDLER_NAME: str = 'soapwire.file'

LOG_FORMAT: str = '%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s'
LOG_DATE_FORMAT: str = '%Y-%m-%d %H:%M:%S'


def _named_handler(package_logger: logging.Logger, name: str) -> logging.Handler | None:
    return next((h for h in package_logger.handlers if h.get_name() == name), None)


def _file_handler(log_file_path: Path, formatter: logging.Formatter) -> logging.FileHandler:
    log_file_path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(
        filename=str(log_file_path),
        mode='a',  # Append mode
        encoding='utf-8',
    )
    handler.set_name(FILE_HANDLER_NAME)
    handler.setFormatter(formatter)
    return handler


def setup_logger(
    console_level: int = logging.INFO,
    log_file_path: Path | None = None,
    file_level: int = logging.DEBUG,
) -> logging.Logger:
    """
    Set up logging for the soapwire package.

    The function is idempotent: calling it again updates the levels of the
    existing handlers instead of adding duplicates. A file handler is
    replaced when the log file path changes and removed when no path is
    given.

    Args:
        console_level: Level of the console (stdout) handler.
        log_file_path: Optional log file. Written in addition to the console.
        file_level: Level of the file handler. Ignored without a log file.

    Returns:
        The 'soapwire' package logger.

    Example:
        >>> # Console at INFO, SOAP envelopes and responses in a DEBUG file
        >>> setup_logger(logging.INFO, Path('logs/soapwire.log'), logging.DEBUG)
    """
    package_logger: logging.Logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console: logging.Handler | None = _named_handler(package_logger, CONSOLE_HANDLER_NAME)
    if console is None:
        console = logging.StreamHandler(stdout)
        console.set_name(CONSOLE_HANDLER_NAME)
        console.setFormatter(formatter)
        package_logger.addHandler(console)
    console.setLevel(console_level)

    current_file: logging.Handler | None = _named_handler(package_logger, FILE_HANDLER_NAME)
    if current_file is not None and (
        log_file_path is None
        or not isinstance(current_file, logging.FileHandler)
        or Path(current_file.baseFilename).resolve() != log_file_path.resolve()
    ):
        package_logger.removeHandler(current_file)
        current_file.close()
        current_file = None

    package_level: int = console_level
    if log_file_path is not None:
        if current_file is None:
            current_file = _file_handler(log_file_path, formatter)
            package_logger.addHandler(current_file)
        current_file.setLevel(file_level)
        package_level = min(console_level, file_level)

    # The package logger passes everything either handler wants
    package_logger.setLevel(package_level)
    return package_logger


def setup_logger_from_config(logging_config: LoggingSection) -> logging.Logger:
    """Set up package logging from the 'logging' section of the configuration."""
    return setup_logger(
        console_level=logging_config.console_level,
        log_file_path=logging_config.file_path,
        file_level=logging_config.file_level or logging.DEBUG,
    )
