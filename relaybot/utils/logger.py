# relaybot/utils/logger.py
import logging
import os

# Loggers already handed out, keyed by name
_loggers = {}

_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _resolve_level() -> int:
    """Map LOG_LEVEL onto a logging level, falling back to INFO"""
    level = logging.getLevelName(os.getenv('LOG_LEVEL', 'INFO').upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """
    Return the logger registered under ``name``, creating it on first use.

    Each logger gets a single console handler and does not propagate, so
    repeated calls never stack handlers.
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)

    if not logger.handlers:
        level = _resolve_level()
        logger.setLevel(level)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(console_handler)

        logger.propagate = False

    _loggers[name] = logger
    return logger


root_logger = get_logger("relaybot")


def log_error(error: Exception, context: str = "") -> None:
    """Log error with context and traceback"""
    root_logger.error(f"{context}: {str(error)}", exc_info=error)


def log_warning(message: str) -> None:
    """Log warning message"""
    root_logger.warning(message)


def log_info(message: str) -> None:
    """Log info message"""
    root_logger.info(message)


class RelayLogAdapter(logging.LoggerAdapter):
    """Prefix each record with the relay context it was logged under"""

    def process(self, msg, kwargs):
        context = " ".join(f"{key}={value}" for key, value in self.extra.items())
        return f"[{context}] {msg}", kwargs


def relay_logger(logger: logging.Logger, **context) -> RelayLogAdapter:
    """Wrap ``logger`` so every record names e.g. the source channel and rule"""
    return RelayLogAdapter(logger, context)
