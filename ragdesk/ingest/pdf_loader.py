"""
PDF Loader

Reads a PDF into one RetrievedDocument per page using PyMuPDF (fitz).
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

from ..common.vector_store import RetrievedDocument

logger = logging.getLogger("ragdesk.ingest.pdf_loader")


class PdfLoadError(Exception):
    """The PDF could not be opened or read."""
    pass


def load_pdf(
    source: Union[str, Path, bytes],
    file_name: Optional[str] = None,
) -> List[RetrievedDocument]:
    """
    Read a PDF, one document per page.

    Pages without extractable text are skipped.

    Args:
        source: Path to a PDF file or its raw bytes
        file_name: Name recorded in metadata (defaults to the path's name)

    Returns:
        Page documents with metadata {"file_name", "page_number"}

    Raises:
        PdfLoadError: if the file is missing or not a readable PDF
    """
    import fitz

    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise PdfLoadError(f"PDF not found: {path}")
        file_name = file_name or path.name
        open_kwargs = {"filename": str(path)}
    else:
        file_name = file_name or "upload.pdf"
        open_kwargs = {"stream": source, "filetype": "pdf"}

    try:
        doc = fitz.open(**open_kwargs)
    except Exception as e:
        raise PdfLoadError(f"Could not open {file_name}: {e}") from e

    pages = []
    try:
        for page_index in range(len(doc)):
            text = doc[page_index].get_text("text").strip()
            if not text:
                continue
            pages.append(
                RetrievedDocument(
                    metadata={"file_name": file_name, "page_number": page_index + 1},
                    text=text,
                )
            )
    finally:
        doc.close()

    logger.info("Read %d page(s) with text from %s", len(pages), file_name)
    return pages
