# relaybot/summarizer/tokenizer.py
from abc import ABC, abstractmethod
from typing import List, Sequence

import tiktoken

from ..utils.logger import get_logger

logger = get_logger(__name__)


class TokenCodec(ABC):
    """Encode text to token ids and back"""

    @abstractmethod
    def encode(self, text: str) -> List[int]:
        ...

    @abstractmethod
    def decode(self, token_ids: Sequence[int]) -> str:
        ...

    def count(self, text: str) -> int:
        return len(self.encode(text))


class TiktokenCodec(TokenCodec):
    def __init__(self, encoding_name: str = "cl100k_base"):
        """Initialize codec with a named tiktoken encoding"""
        self.encoding_name = encoding_name
        self.encoder = tiktoken.get_encoding(encoding_name)
        logger.debug(f"Loaded tiktoken encoding {encoding_name}")

    @classmethod
    def for_model(cls, model_name: str) -> "TiktokenCodec":
        """Pick the encoding tiktoken associates with a model"""
        return cls(tiktoken.encoding_for_model(model_name).name)

    def encode(self, text: str) -> List[int]:
        # Special-token markers in scraped pages are plain text here
        return self.encoder.encode_ordinary(text)

    def decode(self, token_ids: Sequence[int]) -> str:
        return self.encoder.decode(list(token_ids))
