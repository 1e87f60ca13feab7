"""
Context Extractor

Best-effort text extraction from retrieved documents whose metadata shape
varies by loader and store.
"""

import logging
from typing import Any, Sequence

logger = logging.getLogger("ragdesk.retriever.context_extractor")

# Metadata keys checked in priority order
TEXT_METADATA_KEYS = ("page_content", "text", "content", "document")

EXTRACTION_PLACEHOLDER = "Unable to extract document text"

DOCUMENT_SEPARATOR = "\n\n"


def extract_text(document: Any) -> str:
    """
    Extract the textual payload of a retrieved document.

    Tries each key in TEXT_METADATA_KEYS and returns the string form of the
    first non-None value; otherwise falls back to str(document). Never
    raises: any failure yields EXTRACTION_PLACEHOLDER.
    """
    try:
        metadata = getattr(document, "metadata", None)
        if metadata:
            for key in TEXT_METADATA_KEYS:
                value = metadata.get(key)
                if value is not None:
                    return str(value)

        return str(document)
    except Exception:
        logger.warning("Could not extract document text", exc_info=True)
        return EXTRACTION_PLACEHOLDER


def build_document_context(documents: Sequence[Any]) -> str:
    """Join the extracted text of each document with a blank line"""
    return DOCUMENT_SEPARATOR.join(extract_text(doc) for doc in documents)
