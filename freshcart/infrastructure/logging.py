"""
Logging infrastructure.

Console logging for long-running workers (scheduler sweep, event bus,
stream consumers).
"""
import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """
    Get logger instance.

    A stream handler is attached the first time a name is requested.

    Args:
        name: Logger name (usually module name)
        level: Log level for a newly configured logger

    Returns:
        Logger instance
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(LOG_FORMAT)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(level)
    return logger
