#!/usr/bin/env python3
"""
Ask a Question

Answers one question from the command line, optionally over a PDF.
Uses the same configuration as the server (~/.ragdesk/config.json + env).

Usage:
    python scripts/ask.py "How many bugs in version 1.4.0?"
    python scripts/ask.py --pdf report.pdf "Summarize the document"
"""

import sys
import argparse
import logging
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def load_documents(loader, pdf_path=None, default_path=None):
    """
    Index the PDF to answer over.

    An explicit --pdf that cannot be read ends the script; the configured
    default document is optional and only logged when missing.
    """
    from ragdesk.ingest import PdfLoadError

    if not pdf_path:
        return loader.load_default(default_path)

    try:
        stored = loader.ingest_file(Path(pdf_path).read_bytes(), file_name=Path(pdf_path).name)
    except (OSError, PdfLoadError) as e:
        print(f"[Ask] ERROR: Could not load {pdf_path}: {e}")
        sys.exit(1)
    print(f"[Ask] Loaded {stored} chunk(s) from {pdf_path}")
    return stored


def main():
    parser = argparse.ArgumentParser(description="Answer a question over documents and Jira")
    parser.add_argument("question", nargs="?", default=None, help="Question to answer")
    parser.add_argument("--pdf", type=str, default=None, help="PDF to load before answering")
    parser.add_argument("--show-intent", action="store_true", help="Print the classified intent")
    parser.add_argument("--verbose", action="store_true", help="Log pipeline steps")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    from ragdesk.common.config import DEFAULT_QUESTION, load_config
    from ragdesk.common.embedding_service import EmbeddingService
    from ragdesk.common.llm_client import create_llm_client
    from ragdesk.common.tracker_client import JiraClient
    from ragdesk.common.vector_store import VectorStore
    from ragdesk.ingest import DocumentLoader, TextSplitter
    from ragdesk.retriever import QueryOrchestrator, TrackerDataFetcher

    config = load_config()
    question = args.question or DEFAULT_QUESTION

    llm = create_llm_client(config.llm)
    if not llm.is_available:
        print(f"[Ask] WARNING: LLM provider '{config.llm.provider}' is not available")

    vector_store = None
    if args.pdf or config.documents.default_pdf_path:
        vector_store = VectorStore(EmbeddingService(model=config.embedding.model), topk=config.documents.topk)
        loader = DocumentLoader(
            vector_store,
            TextSplitter(
                chunk_size=config.documents.chunk_size,
                chunk_overlap=config.documents.chunk_overlap,
                min_chunk_chars=config.documents.min_chunk_chars,
            ),
        )
        load_documents(loader, args.pdf, config.documents.default_pdf_path)

    tracker_fetcher = None
    jira = None
    if config.tracker.base_url:
        jira = JiraClient(
            base_url=config.tracker.base_url,
            email=config.tracker.email or None,
            api_token=config.tracker.api_token or None,
            timeout=config.tracker.timeout,
            max_results=config.tracker.max_results,
        )
        tracker_fetcher = TrackerDataFetcher(jira)

    orchestrator = QueryOrchestrator(llm, tracker_fetcher=tracker_fetcher, vector_search=vector_store)
    try:
        result = orchestrator.run(question)
    finally:
        if jira:
            jira.close()

    if args.show_intent:
        print(f"[Ask] Intent: {result.intent}")
    print(result.answer)


if __name__ == "__main__":
    main()
