"""
Document Loader

Feeds PDFs into the vector store: the configured default document at
startup and user uploads at request time.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..common.vector_store import VectorStore
from .pdf_loader import PdfLoadError, load_pdf
from .splitter import TextSplitter

logger = logging.getLogger("ragdesk.ingest.loader")


class DocumentLoader:
    """Reads, splits, tags and stores PDF content"""

    def __init__(self, vector_store: VectorStore, splitter: Optional[TextSplitter] = None):
        self._store = vector_store
        self._splitter = splitter or TextSplitter()

    def load_default(self, path: Optional[Union[str, Path]]) -> int:
        """
        Load the default document at startup.

        A missing or unreadable file is logged and the service carries on
        without it.

        Returns:
            Number of chunks stored (0 on failure)
        """
        if not path:
            logger.warning("No default document configured; document questions have no context")
            return 0

        try:
            pages = load_pdf(path)
        except PdfLoadError as e:
            logger.error("Failed to load default document: %s", e)
            return 0

        return self._store_pages(pages, source="default")

    def ingest_file(self, data: bytes, file_name: str = "upload.pdf") -> int:
        """
        Ingest an uploaded PDF.

        Raises:
            PdfLoadError: if the upload is not a readable PDF
        """
        pages = load_pdf(data, file_name=file_name)
        return self._store_pages(pages, source="upload")

    def _store_pages(self, pages, source: str) -> int:
        chunks = self._splitter.split_documents(pages)
        for chunk in chunks:
            chunk.metadata["source"] = source
            logger.debug("Chunk length: %d", len(chunk.text or ""))

        stored = self._store.add_documents(chunks)
        logger.info("Loaded %d chunk(s) from %d page(s) (%s)", stored, len(pages), source)
        return stored
