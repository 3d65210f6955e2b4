"""Console and file logging for generation runs."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "density_view_generator"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# matplotlib logs font discovery at DEBUG when the PNG writer is first used
NOISY_LOGGERS = ("matplotlib", "PIL")


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[Path, str]] = None
) -> logging.Logger:
    """Route ``density_view_generator`` log records to stdout and optionally a file.

    Calling this again replaces the handlers installed by the previous call.

    Args:
        level: Threshold for the package logger and its handlers
        log_file: Run log to (re)write next to the dataset

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger.debug("Logging to stdout%s", f" and {log_file}" if log_file else "")
    return logger
