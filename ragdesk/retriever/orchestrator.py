"""
Query Orchestrator

Top-level entry point of the query engine.

Pipeline:
1. Classify the question (pure, no I/O)
2. Gather context: tracker lookup or document similarity search
3. Compose the prompt
4. Call the language model and return its answer

Gathering failures never escape: the error becomes context text and the
model is still asked, so the caller always gets a natural-language answer.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..common.llm_utils import clean_llm_query
from .context_extractor import build_document_context
from .prompt_composer import PromptMode, compose, compose_jql_request
from .query_processor import Intent, IntentClassifier, QueryIntent
from .tracker_fetcher import TrackerDataFetcher

logger = logging.getLogger("ragdesk.retriever.orchestrator")

TRACKER_ERROR_TEMPLATE = (
    "Error accessing Jira: {message}\n"
    "The system was unable to retrieve the requested Jira data."
)
DOCUMENT_ERROR_TEMPLATE = (
    "Error searching documents: {message}\n"
    "The system was unable to retrieve relevant document excerpts."
)
ANSWER_ERROR_TEMPLATE = "Sorry, an error occurred while processing your request: {message}"


class OrchestratorState(str, Enum):
    """Stages of one request"""
    CLASSIFYING = "classifying"
    GATHERING = "gathering"
    COMPOSING = "composing"
    COMPLETED = "completed"
    FAILED_BUT_ANSWERED = "failed_but_answered"


@dataclass(frozen=True)
class GatherResult:
    """Outcome of the gathering stage.

    Either ``context`` holds fetched text, or ``error`` holds a note
    describing what failed. Both render to context text.
    """
    mode: PromptMode
    context: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, context: Optional[str], mode: PromptMode) -> "GatherResult":
        return cls(mode=mode, context=context)

    @classmethod
    def failure(cls, note: str, mode: PromptMode) -> "GatherResult":
        return cls(mode=mode, error=note)

    @property
    def ok(self) -> bool:
        return self.error is None

    def render(self) -> Optional[str]:
        return self.context if self.ok else self.error


@dataclass
class QueryResult:
    """Everything produced while answering one question"""
    question: str
    intent: Intent
    answer: str
    state: OrchestratorState
    prompt: Optional[str] = None
    context: Optional[str] = None


class QueryOrchestrator:
    """
    Routes a question to the right data source and asks the model.

    Collaborators:
    - chat_model: call(prompt) -> str
    - tracker_fetcher: TrackerDataFetcher (None when no tracker is configured)
    - vector_search: similarity_search(question) -> documents (None when no
      documents are loaded)
    """

    def __init__(
        self,
        chat_model,
        tracker_fetcher: Optional[TrackerDataFetcher] = None,
        vector_search=None,
        classifier: Optional[IntentClassifier] = None,
    ):
        self._chat_model = chat_model
        self._tracker = tracker_fetcher
        self._vector_search = vector_search
        self._classifier = classifier or IntentClassifier()

    def answer(self, question: str) -> str:
        """Answer a question. Never raises."""
        return self.run(question).answer

    def run(self, question: str) -> QueryResult:
        """
        Answer a question and report how the answer was produced.

        Args:
            question: Raw user question

        Returns:
            QueryResult with the answer, intent, prompt and final state
        """
        intent = self._classifier.classify(question)
        logger.info("Classified question as %s", intent)

        gathered = self._gather(question, intent)
        context = gathered.render()

        prompt = compose(context, question, gathered.mode)
        logger.debug("Prompt for model: %s", prompt)

        try:
            answer = self._chat_model.call(prompt)
        except Exception as e:
            logger.error("Language model call failed: %s", e)
            return QueryResult(
                question=question,
                intent=intent,
                answer=ANSWER_ERROR_TEMPLATE.format(message=e),
                state=OrchestratorState.FAILED_BUT_ANSWERED,
                prompt=prompt,
                context=context,
            )

        return QueryResult(
            question=question,
            intent=intent,
            answer=answer,
            state=OrchestratorState.COMPLETED,
            prompt=prompt,
            context=context,
        )

    def _gather(self, question: str, intent: Intent) -> GatherResult:
        if intent.is_tracker:
            return self._gather_tracker(question, intent)
        return self._gather_documents(question)

    def _gather_documents(self, question: str) -> GatherResult:
        if self._vector_search is None:
            return GatherResult.success(None, PromptMode.PLAIN)

        try:
            documents = self._vector_search.similarity_search(question)
        except Exception as e:
            logger.error("Document search failed: %s", e)
            return GatherResult.failure(
                DOCUMENT_ERROR_TEMPLATE.format(message=e), PromptMode.DOCUMENT
            )

        if not documents:
            logger.info("No matching documents, forwarding question as-is")
            return GatherResult.success(None, PromptMode.PLAIN)

        context = build_document_context(documents)
        logger.debug("Document context: %s", context)
        return GatherResult.success(context, PromptMode.DOCUMENT)

    def _gather_tracker(self, question: str, intent: Intent) -> GatherResult:
        mode = PromptMode.TRACKER_AUGMENTED
        try:
            if self._tracker is None:
                raise RuntimeError("no issue tracker is configured")

            if intent.kind == QueryIntent.VERSION_BUGS:
                data = self._tracker.fetch_bugs_for_version(intent.value)
            elif intent.kind == QueryIntent.VERSION_TASKS:
                data = self._tracker.fetch_tasks_for_version(intent.value)
            elif intent.kind == QueryIntent.PROJECT_TASKS:
                data = self._tracker.fetch_tasks_for_project(intent.value)
            else:
                data = self._tracker.fetch_general(self._create_jql(question))
        except Exception as e:
            logger.error("Error processing Jira query: %s", e)
            return GatherResult.failure(TRACKER_ERROR_TEMPLATE.format(message=e), mode)

        return GatherResult.success(data, mode)

    def _create_jql(self, question: str) -> str:
        jql = clean_llm_query(self._chat_model.call(compose_jql_request(question)))
        logger.info("Generated JQL: %s", jql)
        return jql
