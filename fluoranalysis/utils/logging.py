"""Logging utilities for fluorescence image analysis."""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from fluoranalysis.config.settings import LOGGING


def setup_logger(
    name: str,
    log_dir: Optional[Union[str, Path]] = None,
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """Set up and configure a logger.

    Calling this twice for the same name reconfigures the level but does not
    attach a second set of handlers.

    Args:
        name (str): Logger name
        log_dir (str, optional): Directory for timestamped log files. Defaults to None.
        level (int, optional): Logging level. Defaults to logging.INFO.
        log_file (str, optional): Explicit log file path. Takes precedence over log_dir.

    Returns:
        logging.Logger: Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if getattr(logger, '_fluoranalysis_configured', False):
        return logger

    # Create formatters
    formatter = logging.Formatter(LOGGING["file_format"])
    console_formatter = logging.Formatter(LOGGING["console_format"])

    # Add console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # Add file handler if a destination was given
    if log_file is None and log_dir:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        log_file = os.path.join(log_dir, f"{name}_{timestamp}.log")

    if log_file:
        file_handler = logging.FileHandler(str(log_file))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger._fluoranalysis_configured = True

    return logger
