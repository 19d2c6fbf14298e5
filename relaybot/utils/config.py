# relaybot/utils/config.py
import os
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from relaybot.core.exceptions import ConfigurationError
from relaybot.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36'
)


def _get_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(key, f"{key} must be an integer, got {raw!r}") from e


def _get_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or raw == '':
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(key, f"{key} must be a number, got {raw!r}") from e


def _get_optional(key: str) -> Optional[str]:
    """Treat empty values as unset"""
    return os.getenv(key) or None


class Config:
    def __init__(self):
        """Initialize configuration"""
        # Load environment variables
        load_dotenv()

        # Set environment
        self.env = os.getenv('ENV', 'development')

        # OpenAI-compatible completion endpoint
        self.openai_config = {
            'api_key': _get_optional('OPENAI_API_KEY') or _get_optional('OPENAI_API_TOKEN'),
            'base_url': _get_optional('OPENAI_BASE_URL'),
            'model': os.getenv('OPENAI_MODEL', 'gpt-3.5-turbo'),
            'temperature': _get_float('OPENAI_TEMPERATURE', 0.7),
            'top_p': _get_float('OPENAI_TOP_P', 1.0),
            'stop': _get_optional('OPENAI_STOP'),
            'timeout': _get_float('OPENAI_TIMEOUT', 60.0),
            'retry_times': _get_int('OPENAI_RETRY_TIMES', 3),
            'retry_delay': _get_float('OPENAI_RETRY_DELAY', 0.0)
        }

        # Bot configs
        self.bot_config = {
            'trigger_prefix': os.getenv('BOT_TRIGGER_PREFIX', 'private'),
            'chat_persona': os.getenv('BOT_CHAT_PERSONA', "You're a chatbot."),
            'summary_persona': os.getenv('BOT_SUMMARY_PERSONA', 'As a news reporter AI,'),
            'reply_max_tokens': _get_int('BOT_REPLY_MAX_TOKENS', 256),
            'summary_max_tokens': _get_int('BOT_SUMMARY_MAX_TOKENS', 256),
            'chunk_max_tokens': _get_int('BOT_CHUNK_MAX_TOKENS', 2000),
            'encoding': os.getenv('BOT_TOKEN_ENCODING', 'cl100k_base')
        }

        # Channel configs
        self.channel_config = {
            'type': os.getenv('CHANNEL_TYPE', 'console'),
            'slack_token': _get_optional('SLACK_BOT_TOKEN'),
            'slack_channel': os.getenv('SLACK_CHANNEL', 'github-status'),
            'slack_api_base': os.getenv('SLACK_API_BASE', 'https://slack.com/api'),
            'poll_interval': _get_float('SLACK_POLL_INTERVAL', 3.0),
            'raw_destination': _get_optional('RAW_TEXT_CHANNEL'),
            'reply_destination': _get_optional('REPLY_CHANNEL'),
            'summary_destination': _get_optional('SUMMARY_CHANNEL')
        }

        # Page fetch configs
        self.fetch_config = {
            'timeout': _get_float('FETCH_TIMEOUT', 30.0),
            'user_agent': os.getenv('FETCH_USER_AGENT', DEFAULT_USER_AGENT)
        }

        # Logging configs
        self.log_config = {
            'level': os.getenv('LOG_LEVEL', 'INFO')
        }

        self._validate()

    def _validate(self) -> None:
        """Reject values the pipeline cannot work with"""
        positive = {
            'OPENAI_RETRY_TIMES': self.openai_config['retry_times'],
            'BOT_CHUNK_MAX_TOKENS': self.bot_config['chunk_max_tokens'],
            'BOT_REPLY_MAX_TOKENS': self.bot_config['reply_max_tokens'],
            'BOT_SUMMARY_MAX_TOKENS': self.bot_config['summary_max_tokens']
        }
        for key, value in positive.items():
            if value <= 0:
                logger.error(f"Invalid configuration {key}={value}")
                raise ConfigurationError(key, f"{key} must be positive, got {value}")

        if not self.openai_config['api_key']:
            # Reported again as an AuthError on the first completion call
            logger.warning("OPENAI_API_KEY is not set; completion calls will fail")

    def get_openai_config(self) -> Dict[str, Any]:
        """Get completion endpoint configurations"""
        return self.openai_config

    def get_bot_config(self) -> Dict[str, Any]:
        """Get bot behaviour configurations"""
        return self.bot_config

    def get_channel_config(self) -> Dict[str, Any]:
        """Get channel configurations"""
        return self.channel_config

    def get_fetch_config(self) -> Dict[str, Any]:
        """Get page fetch configurations"""
        return self.fetch_config

    def get_log_config(self) -> Dict[str, Any]:
        """Get logging configurations"""
        return self.log_config

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.env.lower() == 'production'

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.env.lower() == 'development'

    def load(self) -> None:
        """Reload configuration from environment"""
        self.__init__()


# Create global config instance
config = Config()
