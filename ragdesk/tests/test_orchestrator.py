"""
Query Orchestrator Scenario Tests

Runs whole questions through classification, gathering, composition and the
(mocked) language model:
- Tracker questions: version bugs/tasks, project tasks, free-form JQL
- Document questions: similarity search hits, misses, failures
- Failure folding: collaborator errors end up in the prompt, never raised
"""

import pytest
from unittest.mock import Mock

from ragdesk.common.tracker_client import TrackerError
from ragdesk.common.vector_store import RetrievedDocument
from ragdesk.retriever.orchestrator import (
    GatherResult,
    OrchestratorState,
    QueryOrchestrator,
)
from ragdesk.retriever.prompt_composer import PromptMode
from ragdesk.retriever.query_processor import QueryIntent
from ragdesk.retriever.tracker_fetcher import TrackerDataFetcher


def jira_issue(key, issue_type, summary="Something", status="Open"):
    return {
        "key": key,
        "fields": {
            "summary": summary,
            "status": {"name": status},
            "issuetype": {"name": issue_type},
            "priority": {"name": "Medium"},
            "assignee": None,
        },
    }


@pytest.fixture
def chat_model():
    model = Mock()
    model.call.return_value = "model answer"
    return model


@pytest.fixture
def tracker_client():
    client = Mock()
    client.get_items_by_version.return_value = [
        jira_issue("CORE-1", "Bug", summary="Crash on save"),
        jira_issue("CORE-2", "Task", summary="Release notes"),
        jira_issue("CORE-3", "Bug", summary="Wrong totals"),
    ]
    return client


@pytest.fixture
def vector_search():
    search = Mock()
    search.similarity_search.return_value = [
        RetrievedDocument(metadata={"page_content": "Ten years of Python."}),
        RetrievedDocument(metadata={"page_content": "MSc in Computer Science."}),
    ]
    return search


@pytest.fixture
def orchestrator(chat_model, tracker_client, vector_search):
    return QueryOrchestrator(
        chat_model=chat_model,
        tracker_fetcher=TrackerDataFetcher(tracker_client),
        vector_search=vector_search,
    )


class TestTrackerScenarios:
    def test_bugs_in_version_end_to_end(self, orchestrator, chat_model, tracker_client):
        result = orchestrator.run("How many bugs in version 1.4.0?")

        tracker_client.get_items_by_version.assert_called_once_with("1.4.0")
        assert result.intent.kind == QueryIntent.VERSION_BUGS
        assert result.context.startswith("Version: 1.4.0\nTotal bugs found: 2")
        assert "CORE-2" not in result.context
        assert result.answer == "model answer"
        assert result.state == OrchestratorState.COMPLETED
        chat_model.call.assert_called_once_with(result.prompt)

    def test_tracker_prompt_allows_ignoring_context(self, orchestrator):
        result = orchestrator.run("How many bugs in version 1.4.0?")

        assert "CONTEXT:\nVersion: 1.4.0\nTotal bugs found: 2" in result.prompt
        assert "QUESTION:\nHow many bugs in version 1.4.0?" in result.prompt
        assert "respond naturally" in result.prompt

    def test_tasks_in_version(self, orchestrator, tracker_client):
        result = orchestrator.run("list tasks for version 1.4.0")

        assert result.intent.kind == QueryIntent.VERSION_TASKS
        assert "Total tasks found: 1" in result.context
        assert "CORE-2" in result.context

    def test_tasks_for_project_uses_stub(self, orchestrator, tracker_client):
        result = orchestrator.run("tasks for project CORE")

        assert result.intent.kind == QueryIntent.PROJECT_TASKS
        assert result.context.startswith("Project: CORE\n")
        tracker_client.get_items_by_version.assert_not_called()

    def test_unresolved_question_synthesizes_jql(self, orchestrator, chat_model):
        chat_model.call.side_effect = [
            "```jql\nassignee = currentUser() AND status = Open\n```",
            "You have no open tickets.",
        ]

        result = orchestrator.run("Which Jira tickets are open for me?")

        assert result.intent.kind == QueryIntent.UNRESOLVED_TRACKER
        assert result.context.startswith("JQL Query: assignee = currentUser() AND status = Open\n")
        assert result.answer == "You have no open tickets."
        assert chat_model.call.call_count == 2
        jql_prompt = chat_model.call.call_args_list[0].args[0]
        assert "Which Jira tickets are open for me?" in jql_prompt

    def test_tracker_error_is_folded_into_context(self, orchestrator, chat_model, tracker_client):
        tracker_client.get_items_by_version.side_effect = TrackerError(
            "Could not reach Jira at https://jira.example.com: connection refused"
        )

        result = orchestrator.run("Fetching bugs for version X")

        assert "Could not reach Jira at https://jira.example.com: connection refused" in result.prompt
        assert result.context.startswith("Error accessing Jira: ")
        assert result.answer == "model answer"
        assert result.state == OrchestratorState.COMPLETED

    def test_unexpected_tracker_exception_is_folded(self, orchestrator, tracker_client):
        tracker_client.get_items_by_version.side_effect = ConnectionError("socket closed")

        answer = orchestrator.answer("bugs for version 2.0")

        assert answer == "model answer"

    def test_jql_generation_failure_is_folded(self, orchestrator, chat_model):
        chat_model.call.side_effect = [RuntimeError("model timeout"), "fallback answer"]

        result = orchestrator.run("Any Jira story about billing?")

        assert "model timeout" in result.context
        assert result.answer == "fallback answer"

    def test_missing_tracker_is_reported(self, chat_model, vector_search):
        engine = QueryOrchestrator(chat_model=chat_model, vector_search=vector_search)

        result = engine.run("bugs for version 1.0")

        assert "no issue tracker is configured" in result.context
        assert result.answer == "model answer"

    def test_tracker_errors_are_logged(self, orchestrator, tracker_client, caplog):
        import logging
        tracker_client.get_items_by_version.side_effect = TrackerError("boom")

        with caplog.at_level(logging.ERROR, logger="ragdesk.retriever.orchestrator"):
            orchestrator.run("bugs in 1.0")

        assert "Error processing Jira query" in caplog.text


class TestDocumentScenarios:
    def test_general_question_uses_documents(self, orchestrator, vector_search, tracker_client):
        result = orchestrator.run("Summarize the document")

        vector_search.similarity_search.assert_called_once_with("Summarize the document")
        tracker_client.get_items_by_version.assert_not_called()
        assert result.context == "Ten years of Python.\n\nMSc in Computer Science."
        assert result.prompt.startswith("Your task is to answer questions about the document")

    def test_no_documents_forwards_question_verbatim(self, orchestrator, chat_model, vector_search):
        vector_search.similarity_search.return_value = []

        result = orchestrator.run("What is the capital of France?")

        chat_model.call.assert_called_once_with("What is the capital of France?")
        assert result.context is None

    def test_without_vector_search_question_is_plain(self, chat_model):
        engine = QueryOrchestrator(chat_model=chat_model)

        engine.answer("hello")

        chat_model.call.assert_called_once_with("hello")

    def test_search_error_is_folded(self, orchestrator, vector_search):
        vector_search.similarity_search.side_effect = RuntimeError("index corrupted")

        result = orchestrator.run("Summarize the document")

        assert "Error searching documents: index corrupted" in result.prompt
        assert result.answer == "model answer"


class TestModelFailure:
    def test_model_failure_returns_apology(self, orchestrator, chat_model):
        chat_model.call.side_effect = RuntimeError("LLM client is not available")

        result = orchestrator.run("Summarize the document")

        assert result.state == OrchestratorState.FAILED_BUT_ANSWERED
        assert result.answer.startswith("Sorry, an error occurred while processing your request")
        assert "LLM client is not available" in result.answer


class TestGatherResult:
    def test_success_renders_context(self):
        result = GatherResult.success("data", PromptMode.DOCUMENT)
        assert result.ok
        assert result.render() == "data"

    def test_failure_renders_error_note(self):
        result = GatherResult.failure("Error accessing Jira: x", PromptMode.TRACKER_AUGMENTED)
        assert not result.ok
        assert result.render() == "Error accessing Jira: x"
