"""Top level package for the relay bot."""

__version__ = "1.0.0"

from relaybot.utils.config import config
from relaybot.utils.logger import get_logger

__all__ = [
    "__version__",
    "config",
    "get_logger",
    "get_relay_bot",
]


def get_relay_bot(*args, **kwargs):
    """Factory that defers importing network dependencies until needed."""
    from relaybot.main import RelayBot

    return RelayBot(*args, **kwargs)
