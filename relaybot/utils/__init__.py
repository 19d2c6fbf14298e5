"""Light-weight exports for relay utility helpers."""

from relaybot.utils.config import config, Config
from relaybot.utils.logger import get_logger, log_error, log_warning, log_info, relay_logger

__all__ = [
    "config",
    "Config",
    "get_logger",
    "log_error",
    "log_warning",
    "log_info",
    "relay_logger",
]
