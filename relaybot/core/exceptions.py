"""
Relay Exceptions
================

Error taxonomy shared by the completion client, the page fetcher, the
chunker and the configuration layer.
"""


class RelayError(Exception):
    """Base exception for the relay."""

    def __init__(self, message: str, original_error: Exception = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self):
        if self.original_error:
            return f"{self.message} (Caused by: {self.original_error})"
        return self.message


class CompletionError(RelayError):
    """A chat-completion call failed."""

    retryable = False


class TransportError(CompletionError):
    """Network or transport failure talking to the completion endpoint."""

    retryable = True


class AuthError(CompletionError):
    """Credential missing or rejected by the completion endpoint."""

    def __init__(self, message: str = "Authentication failed. Check API key.",
                 original_error: Exception = None):
        super().__init__(message, original_error)


class MalformedResponseError(CompletionError):
    """Completion response could not be read as a result."""


class FetchError(RelayError):
    """A page could not be retrieved or yielded no text."""

    def __init__(self, url: str, message: str, original_error: Exception = None):
        self.url = url
        super().__init__(f"[{url}] {message}", original_error)


class ChunkingError(RelayError):
    """The token codec failed while splitting text."""


class ConfigurationError(RelayError):
    """Invalid configuration value."""

    def __init__(self, config_key: str, message: str = None):
        self.config_key = config_key
        msg = message or f"Configuration error for key: {config_key}"
        super().__init__(msg)
