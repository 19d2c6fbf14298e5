import math

import pytest

from relaybot.core.exceptions import ChunkingError
from relaybot.summarizer.chunker import TokenChunker

from conftest import BrokenCodec, WhitespaceCodec


def _words(n):
    return " ".join(f"w{i}" for i in range(n))


@pytest.mark.parametrize("token_count,max_tokens", [(1, 1), (7, 3), (10, 5), (5000, 2000), (3, 10)])
def test_chunks_reconstruct_the_encoding(codec, token_count, max_tokens):
    text = _words(token_count)
    chunker = TokenChunker(codec, max_tokens=max_tokens)

    chunks = chunker.split(text)

    joined = [token for chunk in chunks for token in chunk.token_ids]
    assert joined == codec.encode(text)
    assert len(chunks) == math.ceil(token_count / max_tokens)
    assert [chunk.index for chunk in chunks] == list(range(len(chunks)))
    assert all(0 < len(chunk) <= max_tokens for chunk in chunks)


def test_final_window_may_be_shorter(codec):
    chunks = TokenChunker(codec).split(_words(5000), 2000)

    assert [len(chunk) for chunk in chunks] == [2000, 2000, 1000]
    assert chunks[0].decoded_text.startswith("w0 w1")
    assert chunks[2].decoded_text.endswith("w4999")


def test_empty_text_yields_no_chunks(codec):
    assert TokenChunker(codec).split("") == []


def test_whitespace_only_text_yields_no_chunks(codec):
    assert TokenChunker(codec).split("   \n ") == []


def test_split_accepts_an_explicit_codec():
    chunker = TokenChunker(BrokenCodec())
    chunks = chunker.split("a b c", 2, codec=WhitespaceCodec())
    assert [chunk.decoded_text for chunk in chunks] == ["a b", "c"]


def test_non_positive_window_is_rejected(codec):
    with pytest.raises(ValueError):
        TokenChunker(codec).split("a b", 0)


def test_codec_failure_fails_the_whole_split():
    with pytest.raises(ChunkingError) as exc_info:
        TokenChunker(BrokenCodec()).split("anything", 2)
    assert isinstance(exc_info.value.original_error, KeyError)


def test_count_tokens_uses_codec(codec):
    assert TokenChunker(codec).count_tokens("one two three") == 3


def test_tiktoken_codec_round_trips_a_chunked_article():
    from relaybot.summarizer.tokenizer import TiktokenCodec

    try:
        codec = TiktokenCodec("cl100k_base")
    except Exception as e:
        pytest.skip(f"tiktoken encoding unavailable: {e}")

    text = "Breaking news: the relay summarised the article. " * 50
    chunks = TokenChunker(codec).split(text, 16)

    assert [t for chunk in chunks for t in chunk.token_ids] == codec.encode(text)
    assert "".join(chunk.decoded_text for chunk in chunks) == text
