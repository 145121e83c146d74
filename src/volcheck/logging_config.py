"""
Logging Configuration
Sets up the package logger for command-line runs.

Progress and overlap messages go to stdout as ``LEVEL: message``.  The
per-placement trace of the overlap check and the include-by-include trace
of the scene loader are only shown with ``verbose``.
"""
import logging
import sys
from typing import Optional

DETAIL_LOGGERS = ("volcheck.overlap", "volcheck.io.scene")


def setup_logging(verbose: bool = False, log_file: Optional[str] = None,
                  level: int = logging.INFO) -> logging.Logger:
    """
    Configures the logger for the 'volcheck' namespace.

    Args:
        verbose: Log the overlap check and scene loading in detail.
        log_file: Optional path to save logs to a file, with timestamps.
        level: Level of the 'volcheck' logger itself.
    """
    logger = logging.getLogger("volcheck")
    logger.setLevel(level)

    # avoid duplicate output when called more than once
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    for name in DETAIL_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.NOTSET)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        ))
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
