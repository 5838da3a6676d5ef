"""
Logging Configuration
Sets up the package logger for the viewer and the headless converter.
"""
import logging
import sys
from typing import Optional, Union

PACKAGE_LOGGER = "primitiveviewer"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# trimesh and pyvista log every cache miss at DEBUG
NOISY_LOGGERS = ("trimesh", "pyvista", "PIL")


def parse_level(level: Union[int, str]) -> int:
    """Accepts logging.DEBUG or names like 'debug' / 'WARNING'."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configures the 'primitiveviewer' logger namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG or "info").
        log_file: Optional path to also write logs to.

    Returns:
        The configured package logger.
    """
    numeric_level = parse_level(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(numeric_level)

    # Reconfiguring (e.g. a second CLI run in the same process) must not duplicate output
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    logger.debug(f"Logging initialized at level {logging.getLevelName(numeric_level)}.")
    return logger
