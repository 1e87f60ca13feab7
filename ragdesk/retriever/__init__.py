"""
Retriever - Question Routing and Context Assembly

Decides where the answer to a question should come from, gathers that
context, and asks the language model.

Key Components:
- IntentClassifier: document question vs. tracker question (+ sub-intent)
- TrackerDataFetcher: tracker lookups formatted as context
- context_extractor: text payload of retrieved documents
- prompt_composer: final prompt for the model
- QueryOrchestrator: runs the whole pipeline

Pipeline:
1. Classify the question
2. Fetch tracker records or search documents
3. Compose the prompt
4. Call the language model
"""

from .query_processor import Intent, IntentClassifier, QueryIntent, classify, extract_token
from .context_extractor import extract_text, build_document_context
from .tracker_fetcher import TrackerDataFetcher, TrackerRecord
from .prompt_composer import PromptMode, compose
from .orchestrator import QueryOrchestrator, QueryResult, OrchestratorState, GatherResult

__all__ = [
    "Intent",
    "IntentClassifier",
    "QueryIntent",
    "classify",
    "extract_token",
    "extract_text",
    "build_document_context",
    "TrackerDataFetcher",
    "TrackerRecord",
    "PromptMode",
    "compose",
    "QueryOrchestrator",
    "QueryResult",
    "OrchestratorState",
    "GatherResult",
]
