# ring_escape/utils/logging_setup.py

import logging
from pathlib import Path

LOGGER_NAME = "ring_escape"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str | int = "INFO",
                  log_file: str | Path | None = None,
                  fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """
    Configure the package logger (not the root logger).

    Every module logs through `logging.getLogger(__name__)`, which places it
    under the "ring_escape" logger configured here. Output goes to the console
    and, if `log_file` is given, to that file. Calling this again replaces the
    handlers instead of stacking them.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    formatter = logging.Formatter(fmt)

    if logger.hasHandlers():
        logger.handlers.clear()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized at level %s (log file: %s)", logging.getLevelName(logger.level), log_file)
    return logger
