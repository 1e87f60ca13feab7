"""
ragdesk

Answers natural-language questions from two sources:
- semantic search over embedded PDF chunks
- structured lookups against a Jira issue tracker

A question is classified first; the matching source supplies the context
and a language model writes the answer. Retrieval failures are folded into
the context instead of failing the request.

Usage:
    from ragdesk.common import load_config, create_llm_client, JiraClient
    from ragdesk.retriever import QueryOrchestrator, TrackerDataFetcher
    from ragdesk.server import app
"""

__version__ = "0.1.0"
