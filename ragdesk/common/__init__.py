"""
ragdesk Common Module

Shared infrastructure and collaborator clients for the query engine.
"""

from .config import RagdeskConfig, load_config
from .embedding_service import EmbeddingService
from .llm_client import LLMClient, create_llm_client
from .tracker_client import JiraClient, TrackerError
from .vector_store import RetrievedDocument, VectorStore

__all__ = [
    "RagdeskConfig",
    "load_config",
    "EmbeddingService",
    "LLMClient",
    "create_llm_client",
    "JiraClient",
    "TrackerError",
    "RetrievedDocument",
    "VectorStore",
]
