"""
Text Splitter

Splits page text into embedding-sized chunks. Sizes are counted in
whitespace-delimited tokens; a chunk is cut at the last sentence end in
its window once it holds at least ``min_chunk_chars`` characters.
"""

import re
from typing import List, Sequence

from ..common.vector_store import RetrievedDocument

_TOKEN_PATTERN = re.compile(r"\S+\s*")
_SENTENCE_END = (".", "?", "!")


class TextSplitter:
    """Token-window splitter with sentence-boundary cuts"""

    def __init__(
        self,
        chunk_size: int = 800,
        chunk_overlap: int = 0,
        min_chunk_chars: int = 350,
        min_chunk_length: int = 5,
    ):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= chunk_overlap < chunk_size:
            raise ValueError("chunk_overlap must be in [0, chunk_size)")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.min_chunk_chars = min_chunk_chars
        self.min_chunk_length = min_chunk_length

    def split_text(self, text: str) -> List[str]:
        tokens = _TOKEN_PATTERN.findall(text or "")
        chunks = []
        start = 0

        while start < len(tokens):
            window = tokens[start:start + self.chunk_size]
            consumed = len(window)

            if start + consumed < len(tokens):
                cut = self._sentence_cut(window)
                if cut:
                    consumed = cut

            chunk = "".join(window[:consumed]).strip()
            if len(chunk) > self.min_chunk_length:
                chunks.append(chunk)

            if start + consumed >= len(tokens):
                break
            start += max(1, consumed - self.chunk_overlap)

        return chunks

    def _sentence_cut(self, window: List[str]) -> int:
        """Token count up to the last sentence end past min_chunk_chars, or 0"""
        length = 0
        cut = 0
        for i, token in enumerate(window):
            length += len(token)
            stripped = token.rstrip()
            ends_sentence = stripped.endswith(_SENTENCE_END) or "\n" in token
            if ends_sentence and length > self.min_chunk_chars:
                cut = i + 1
        return cut

    def split_documents(self, documents: Sequence[RetrievedDocument]) -> List[RetrievedDocument]:
        """Split each document, copying its metadata onto every chunk"""
        chunks = []
        for doc in documents:
            for index, text in enumerate(self.split_text(doc.text or "")):
                chunks.append(
                    RetrievedDocument(
                        metadata={**doc.metadata, "chunk_index": index},
                        text=text,
                    )
                )
        return chunks
