"""
Core value types and errors
"""

from .exceptions import (
    RelayError,
    CompletionError,
    TransportError,
    AuthError,
    MalformedResponseError,
    FetchError,
    ChunkingError,
    ConfigurationError,
)
from .models import (
    InboundMessage,
    OutboundMessage,
    ChatMessage,
    CompletionRequest,
    CompletionResult,
    TokenUsage,
    Chunk,
)

__all__ = [
    'RelayError',
    'CompletionError',
    'TransportError',
    'AuthError',
    'MalformedResponseError',
    'FetchError',
    'ChunkingError',
    'ConfigurationError',
    'InboundMessage',
    'OutboundMessage',
    'ChatMessage',
    'CompletionRequest',
    'CompletionResult',
    'TokenUsage',
    'Chunk',
]
