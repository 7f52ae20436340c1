"""
Logging setup for the command-line drivers.

The library itself only creates module loggers; configuring handlers is left
to whoever runs it.
"""

import logging
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> Optional[Path]:
    """
    Set up logging with a console handler and an optional file handler.

    Args:
        level: Logging level (default: logging.INFO)
        log_file: Optional path of a log file to write as well
        format_string: Optional custom format string. If None, uses default format.

    Returns:
        Path to the log file, or None when only logging to the console

    Example:
        >>> setup_logging(logging.DEBUG)
        >>> logging.getLogger("block_shock").debug("Spawn batches are now visible")
    """
    formatter = logging.Formatter(
        format_string or DEFAULT_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates on repeated calls
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return log_file
