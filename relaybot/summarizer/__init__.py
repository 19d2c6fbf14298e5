"""
Token chunking and chunk-by-chunk summarization
"""

from .tokenizer import TokenCodec, TiktokenCodec
from .chunker import TokenChunker
from .summary_templates import SummaryTemplates
from .pipeline import SummaryPipeline

__all__ = [
    'TokenCodec',
    'TiktokenCodec',
    'TokenChunker',
    'SummaryTemplates',
    'SummaryPipeline',
]
