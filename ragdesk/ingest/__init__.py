"""
Ingest - PDF loading for document questions

Reads PDFs page by page, splits pages into chunks and stores them in the
vector store.
"""

from .pdf_loader import PdfLoadError, load_pdf
from .splitter import TextSplitter
from .loader import DocumentLoader

__all__ = [
    "PdfLoadError",
    "load_pdf",
    "TextSplitter",
    "DocumentLoader",
]
