"""Logging setup for schemabridge and its translation diagnostics."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union
from .settings import TranslationConfig, get_settings

LOGGER_NAME = "schemabridge"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEBUG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"


def resolve_level(level: Union[str, int]) -> int:
    """
    Turn a level name such as ``"debug"`` into its numeric value.

    Raises:
        ValueError: If the name is not a standard logging level
    """
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level '{level}'")
    return value


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the ``schemabridge`` logger hierarchy.

    Level and log file fall back to the ``SCHEMABRIDGE_LOG_LEVEL`` and
    ``SCHEMABRIDGE_LOG_FILE`` settings. At DEBUG level records also carry
    their source location.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file that receives the same records as stdout
        format_string: Optional custom format string

    Returns:
        The package logger
    """
    settings = get_settings()
    numeric_level = resolve_level(level or settings.log_level)
    log_file_path = log_file or settings.log_file
    formatter = logging.Formatter(
        format_string or (DEBUG_FORMAT if numeric_level <= logging.DEBUG else DEFAULT_FORMAT)
    )

    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(numeric_level)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file_path:
        handlers.append(logging.FileHandler(log_file_path, encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    # Records stop here instead of reaching the root logger
    package_logger.propagate = False
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``schemabridge`` namespace, configuring it on first use."""
    if not logging.getLogger(LOGGER_NAME).handlers:
        setup_logging()

    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def log_translation_config(logger: logging.Logger, config: TranslationConfig) -> None:
    """Record the translation options in effect at DEBUG level."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(
        f"Translation config: soft_deletes={config.soft_deletes}, "
        f"on_delete={config.on_delete}, skipping {len(config.skip_tables)} tables "
        f"({', '.join(sorted(config.skip_tables)) or 'none'})"
    )
