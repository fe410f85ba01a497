import logging
import sys
from typing import Optional

LOGGER_NAME = "marks_lookup"

_logger: Optional[logging.Logger] = None


class TaggedFormatter(logging.Formatter):
    """Formats records as `[LEVEL] message`, e.g. `[ERROR] token exchange failed`."""

    def format(self, record: logging.LogRecord) -> str:
        message = f"[{record.levelname}] {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


def setup_logging(level: str = "INFO") -> logging.Logger:
    global _logger
    if _logger is not None:
        _logger.setLevel(level)
        return _logger

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(TaggedFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    _logger = logger
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Child logger of the application logger, configuring it on first use."""
    root = _logger or setup_logging()
    if name is None:
        return root
    return root.getChild(name)


def reset_logging() -> None:
    global _logger
    _logger = None
