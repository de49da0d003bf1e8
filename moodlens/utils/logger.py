import logging
import os
import sys
from typing import Optional

# Constants
LOG_DIR = "logs"
LOG_FILE_NAME = "moodlens.log"
LOG_FORMAT = "[%(asctime)s] | %(levelname)-8s | %(name)-15s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str = "moodlens", level: str = "INFO",
                 log_dir: Optional[str] = LOG_DIR) -> logging.Logger:
    """
    Configures and returns a standardized logger.

    Features:
    - Console Output (StreamHandler)
    - File Output, overwritten on each run (skipped when log_dir is None)
    - Standardized Formatting

    Configure the 'moodlens' root logger once and every module logger
    (moodlens.core.trends, ...) inherits its handlers.

    Args:
        name: Name of the logger
        level: Level name (DEBUG, INFO, ...)
        log_dir: Directory for the log file, None for console only

    Returns:
        Configured Logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Avoid duplicate handlers if setup is called multiple times
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # 1. Console Handler (stderr, stdout carries the JSON output)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # 2. File Handler, mode 'w': one clean log per execution
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(log_dir, LOG_FILE_NAME), mode='w', encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger

