"""
Value types passed between the channel, the dispatcher and the completion client.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

ROLES = ("system", "user", "assistant")
FINISH_REASONS = ("stop", "length")


# ---------------------------------------------------------------------
# Channel messages
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class InboundMessage:
    """
    Message received from a channel.
    """

    source_channel: str
    text: str


@dataclass(frozen=True)
class OutboundMessage:
    """
    Message to be posted to a channel.
    """

    destination: str
    text: str


# ---------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown chat role: {self.role!r}")

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls("system", content)

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls("user", content)


Prompt = List[ChatMessage]


# ---------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class CompletionRequest:
    """
    One chat-completion call. A system message, if any, must come first.
    """

    prompt: Tuple[ChatMessage, ...]
    max_output_tokens: int
    model: str
    temperature: float = 0.7
    top_p: float = 1.0
    sampling_count: int = 1
    stop: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "prompt", tuple(self.prompt))
        if not self.prompt:
            raise ValueError("Prompt must contain at least one message")
        if any(m.role == "system" for m in self.prompt[1:]):
            raise ValueError("System message must lead the prompt")
        if self.max_output_tokens <= 0:
            raise ValueError(f"max_output_tokens must be positive, got {self.max_output_tokens}")
        if self.sampling_count != 1:
            raise ValueError("Exactly one sampling candidate is supported")

    def messages(self) -> List[dict]:
        return [m.to_dict() for m in self.prompt]


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0

    def __post_init__(self):
        if self.prompt_tokens < 0 or self.completion_tokens < 0:
            raise ValueError("Token counts must be non-negative")

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass(frozen=True)
class CompletionResult:
    text: str
    finish_reason: str = "stop"
    usage: TokenUsage = field(default_factory=TokenUsage)

    @staticmethod
    def normalize_finish_reason(reason: Optional[str]) -> str:
        return reason if reason in FINISH_REASONS else "other"


# ---------------------------------------------------------------------
# Chunk
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class Chunk:
    """
    A token-bounded slice of a longer text.
    """

    index: int
    token_ids: Tuple[int, ...]
    decoded_text: str

    def __len__(self) -> int:
        return len(self.token_ids)
