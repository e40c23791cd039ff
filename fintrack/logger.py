"""
Logging setup for FinTrack.

All loggers hang off the "FinTrack" root so one set of handlers serves
the whole package. Configure with:
- FINTRACK_LOG_LEVEL: DEBUG, INFO (default), WARNING, ...
- FINTRACK_LOG_DIR: directory for fintrack.log (default "logs"); an empty
  value keeps logging on the console only
"""
import logging
import os
from logging.handlers import RotatingFileHandler

ROOT_LOGGER_NAME = "FinTrack"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE_NAME = "fintrack.log"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3


def _file_handler(log_dir: str, formatter: logging.Formatter):
    try:
        os.makedirs(log_dir, exist_ok=True)
        handler = RotatingFileHandler(
            os.path.join(log_dir, LOG_FILE_NAME),
            maxBytes=MAX_LOG_BYTES,
            backupCount=LOG_BACKUPS,
            encoding='utf-8'
        )
    except OSError as e:
        logging.getLogger(ROOT_LOGGER_NAME).warning(f"File logging disabled: {e}")
        return None
    handler.setFormatter(formatter)
    return handler


def setup_logger(name: str = ROOT_LOGGER_NAME, level: str = None, log_dir: str = None) -> logging.Logger:
    """
    Attach console and rotating file handlers to a logger once.

    Args:
        name: Logger name
        level: Level name; defaults to FINTRACK_LOG_LEVEL or INFO
        log_dir: Directory for the log file; defaults to FINTRACK_LOG_DIR or "logs"

    Returns:
        The configured logger (calling again does not add handlers)
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = (level or os.getenv("FINTRACK_LOG_LEVEL", "INFO")).upper()
    logger.setLevel(getattr(logging, level, logging.INFO))

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    log_dir = os.getenv("FINTRACK_LOG_DIR", "logs") if log_dir is None else log_dir
    if log_dir:
        handler = _file_handler(log_dir, formatter)
        if handler:
            logger.addHandler(handler)

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """
    Child of the FinTrack logger for one module.

    Example:
        logger = get_logger(__name__)  # "fintrack.ai.aggregator" -> "FinTrack.ai.aggregator"
    """
    suffix = module_name.removeprefix("fintrack.")
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{suffix}")


# Package-wide logger
logger = setup_logger()
