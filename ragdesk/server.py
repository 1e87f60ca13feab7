"""
ragdesk Server

FastAPI server answering questions over loaded documents and Jira.

Endpoints:
- GET /: Answer a question (plain text)
- POST /upload: Ingest a PDF, then answer a question
- GET /health: Health check

Pipeline:
1. Classify the question (document vs. tracker)
2. Search documents or fetch tracker records
3. Compose the prompt and ask the language model
4. Return the answer as plain text

Partial failures (tracker down, search error, unreadable upload) are
answered with status 200 and an explanatory or apologetic answer.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from . import __version__
from .common.config import DEFAULT_QUESTION, RagdeskConfig, load_config
from .common.embedding_service import get_embedding_service
from .common.llm_client import LLMClient, create_llm_client
from .common.tracker_client import JiraClient
from .common.vector_store import VectorStore
from .ingest import DocumentLoader, PdfLoadError, TextSplitter
from .retriever import QueryOrchestrator, TrackerDataFetcher

logger = logging.getLogger("ragdesk.server")


# Global state
config: Optional[RagdeskConfig] = None
llm_client: Optional[LLMClient] = None
vector_store: Optional[VectorStore] = None
document_loader: Optional[DocumentLoader] = None
jira_client: Optional[JiraClient] = None
orchestrator: Optional[QueryOrchestrator] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize components on startup"""
    global config, llm_client, vector_store, document_loader, jira_client, orchestrator

    logger.info("Starting up...")

    config = load_config()

    # Language model
    llm_client = create_llm_client(config.llm)
    if llm_client.is_available:
        logger.info("LLM ready (%s, %s)", llm_client.provider, llm_client.model)
    else:
        logger.warning("LLM provider %s not available; answers will report the error", config.llm.provider)

    # Documents
    embedding_service = get_embedding_service(model=config.embedding.model)
    vector_store = VectorStore(embedding_service, topk=config.documents.topk)
    document_loader = DocumentLoader(
        vector_store,
        TextSplitter(
            chunk_size=config.documents.chunk_size,
            chunk_overlap=config.documents.chunk_overlap,
            min_chunk_chars=config.documents.min_chunk_chars,
        ),
    )
    try:
        document_loader.load_default(config.documents.default_pdf_path)
    except Exception as e:
        logger.error("Default document could not be indexed: %s", e)

    # Tracker
    tracker_fetcher = None
    if config.tracker.base_url:
        jira_client = JiraClient(
            base_url=config.tracker.base_url,
            email=config.tracker.email or None,
            api_token=config.tracker.api_token or None,
            timeout=config.tracker.timeout,
            max_results=config.tracker.max_results,
        )
        tracker_fetcher = TrackerDataFetcher(jira_client)
        logger.info("Jira client ready (%s)", config.tracker.base_url)
    else:
        logger.warning("No Jira base URL configured; tracker questions will report it")

    orchestrator = QueryOrchestrator(
        chat_model=llm_client,
        tracker_fetcher=tracker_fetcher,
        vector_search=vector_store,
    )
    logger.info("Ready to answer questions (%d document chunk(s) loaded)", vector_store.count)

    yield

    # Cleanup
    logger.info("Shutting down...")
    if jira_client:
        jira_client.close()


app = FastAPI(
    title="ragdesk",
    description="Question answering over documents and Jira",
    version=__version__,
    lifespan=lifespan,
)


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    initialized: bool
    llm_provider: Optional[str] = None
    llm_available: bool = False
    tracker_configured: bool = False
    document_chunks: int = 0


def _require_orchestrator() -> QueryOrchestrator:
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return orchestrator


# =============================================================================
# Endpoints
# =============================================================================

@app.get("/", response_class=PlainTextResponse)
def ask(question: str = DEFAULT_QUESTION):
    """Answer a question from loaded documents or Jira"""
    return _require_orchestrator().answer(question)


@app.post("/upload", response_class=PlainTextResponse)
def upload_and_query(file: UploadFile = File(...), question: str = Form(...)):
    """Store an uploaded PDF, then answer a question"""
    engine = _require_orchestrator()

    if document_loader is None:
        raise HTTPException(status_code=503, detail="Document loader not initialized")

    try:
        stored = document_loader.ingest_file(file.file.read(), file_name=file.filename or "upload.pdf")
    except PdfLoadError as e:
        logger.error("Error processing PDF upload: %s", e)
        return f"Error processing your PDF: {e}"
    except Exception as e:
        logger.exception("Failed to index uploaded PDF %s", file.filename)
        return f"Error processing your PDF: {e}"

    logger.info("Indexed %d chunk(s) from %s", stored, file.filename)
    return engine.answer(question)


@app.get("/health", response_model=HealthResponse)
def health():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        service="ragdesk",
        initialized=orchestrator is not None,
        llm_provider=llm_client.provider if llm_client else None,
        llm_available=llm_client.is_available if llm_client else False,
        tracker_configured=jira_client is not None,
        document_chunks=vector_store.count if vector_store else 0,
    )


# =============================================================================
# CLI Entry Point
# =============================================================================

def run_server():
    """Run the ragdesk server"""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    server_config = load_config().server
    logger.info("Starting server on %s:%d", server_config.host, server_config.port)
    uvicorn.run(
        "ragdesk.server:app",
        host=server_config.host,
        port=server_config.port,
        reload=False,
    )


if __name__ == "__main__":
    run_server()
