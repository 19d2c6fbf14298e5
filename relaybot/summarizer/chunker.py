# relaybot/summarizer/chunker.py
from typing import List, Optional

from .tokenizer import TokenCodec
from ..core.exceptions import ChunkingError
from ..core.models import Chunk
from ..utils.logger import get_logger

logger = get_logger(__name__)


class TokenChunker:
    def __init__(self, codec: TokenCodec, max_tokens: int = 2000):
        """Initialize chunker with a codec and a default window size"""
        self.codec = codec
        self.max_tokens = max_tokens

    def split(
        self,
        text: str,
        max_tokens: Optional[int] = None,
        codec: Optional[TokenCodec] = None
    ) -> List[Chunk]:
        """
        Split text into consecutive windows of at most ``max_tokens`` tokens.

        The text is encoded once; each window is decoded on its own, so chunk
        boundaries fall on token boundaries and may cut through a word.
        Empty text yields no chunks. A codec failure aborts the whole split.
        """
        max_tokens = self.max_tokens if max_tokens is None else max_tokens
        codec = codec or self.codec

        if max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {max_tokens}")

        if not text:
            return []

        try:
            token_ids = list(codec.encode(text))
            chunks = []
            for index, start in enumerate(range(0, len(token_ids), max_tokens)):
                window = tuple(token_ids[start:start + max_tokens])
                chunks.append(Chunk(
                    index=index,
                    token_ids=window,
                    decoded_text=codec.decode(window)
                ))
        except Exception as e:
            logger.error(f"Error splitting text into token chunks: {str(e)}")
            raise ChunkingError("Token codec failed while splitting text", e) from e

        logger.debug(f"Split {len(token_ids)} tokens into {len(chunks)} chunks of <= {max_tokens}")
        return chunks

    def count_tokens(self, text: str) -> int:
        """Count tokens in text with the configured codec"""
        return self.codec.count(text)
