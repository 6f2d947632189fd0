import logging
import os
from logging.handlers import RotatingFileHandler

DRIVER_LOGGER_NAME = "browser_driver"


def get_log_dir():
    """Log directory: $BROWSER_DRIVER_LOG_DIR, else ./logs under the working directory."""
    return os.environ.get("BROWSER_DRIVER_LOG_DIR") or os.path.join(os.getcwd(), "logs")


def setup_logger(name, log_file, level=logging.INFO):
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s")

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Re-running setup (e.g. a second CLI invocation in-process) must not double log
    log_file = os.path.abspath(log_file)
    for existing in logger.handlers:
        if getattr(existing, "baseFilename", None) == log_file:
            return logger

    os.makedirs(os.path.dirname(log_file), exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=1024 * 1024 * 5, backupCount=5)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def setup_driver_logger(level=logging.INFO):
    """Attach the driver log file; module loggers (browser_driver.*) propagate here."""
    return setup_logger(
        DRIVER_LOGGER_NAME, os.path.join(get_log_dir(), "driver.log"), level
    )
