# relaybot/summarizer/pipeline.py
from typing import AsyncIterator, Optional

from .chunker import TokenChunker
from .summary_templates import SummaryTemplates
from ..core.exceptions import CompletionError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SummaryPipeline:
    def __init__(
        self,
        chunker: TokenChunker,
        client,
        templates: SummaryTemplates,
        max_tokens_per_chunk: int = 2000,
        max_output_tokens: int = 256
    ):
        """Initialize pipeline that summarizes a long text chunk by chunk"""
        self.chunker = chunker
        self.client = client
        self.templates = templates
        self.max_tokens_per_chunk = max_tokens_per_chunk
        self.max_output_tokens = max_output_tokens

    async def summarize(
        self,
        text: str,
        max_tokens_per_chunk: Optional[int] = None
    ) -> AsyncIterator[str]:
        """
        Yield one summary per chunk of ``text``, in chunk order.

        A chunk whose completion call fails is skipped and the remaining
        chunks still run. A chunking failure propagates before anything is
        yielded.
        """
        if max_tokens_per_chunk is None:
            max_tokens_per_chunk = self.max_tokens_per_chunk
        chunks = self.chunker.split(text, max_tokens_per_chunk)
        logger.info(f"Summarizing {len(chunks)} chunks")

        for chunk in chunks:
            request = self.client.build_request(
                self.templates.chunk_summary_prompt(chunk.decoded_text),
                self.max_output_tokens
            )
            try:
                result = await self.client.complete(request)
            except CompletionError as e:
                logger.error(f"Error summarizing chunk {chunk.index}: {str(e)}")
                continue

            logger.debug(
                f"Chunk {chunk.index} summarized, finish_reason={result.finish_reason}, "
                f"total_tokens={result.usage.total_tokens}"
            )
            yield result.text
