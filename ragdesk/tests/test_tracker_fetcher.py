"""
Tests for tracker record parsing and context formatting
"""

import pytest
from unittest.mock import Mock

from ragdesk.retriever.tracker_fetcher import (
    TrackerDataFetcher,
    TrackerRecord,
    parse_records,
)


def jira_issue(key, issue_type, summary="Something", status="Open", priority="High", assignee=None):
    """Raw issue in Jira REST shape"""
    fields = {
        "summary": summary,
        "status": {"name": status},
        "issuetype": {"name": issue_type},
        "priority": {"name": priority} if priority else None,
        "assignee": {"displayName": assignee} if assignee else None,
    }
    return {"key": key, "fields": fields}


class TestTrackerRecord:
    def test_from_jira_shape(self):
        record = TrackerRecord.from_raw(
            jira_issue("CORE-1", "Bug", summary="Crash on save", priority="Blocker", assignee="Dana Lee")
        )

        assert record.key == "CORE-1"
        assert record.summary == "Crash on save"
        assert record.status == "Open"
        assert record.issue_type == "Bug"
        assert record.priority == "Blocker"
        assert record.assignee == "Dana Lee"

    def test_from_flat_shape(self):
        record = TrackerRecord.from_raw({
            "key": "WEB-7",
            "summary": "Add footer",
            "status": "Done",
            "type": "Task",
        })

        assert record.issue_type == "Task"
        assert record.priority is None
        assert record.assignee is None

    def test_optional_fields_missing(self):
        record = TrackerRecord.from_raw(jira_issue("CORE-2", "Task", priority=None))
        assert record.priority is None
        assert record.assignee is None

    def test_malformed_item_raises(self):
        with pytest.raises(KeyError):
            TrackerRecord.from_raw({"fields": {}})

    def test_null_status_raises(self):
        raw = jira_issue("CORE-5", "Bug")
        raw["fields"]["status"] = None
        with pytest.raises(TypeError):
            TrackerRecord.from_raw(raw)

    def test_is_type_ignores_case(self):
        record = TrackerRecord.from_raw(jira_issue("CORE-3", "DEFECT"))
        assert record.is_type(("bug", "defect"))

    def test_records_are_immutable(self):
        record = TrackerRecord.from_raw(jira_issue("CORE-4", "Bug"))
        with pytest.raises(Exception):
            record.status = "Closed"


class TestParseRecords:
    def test_skips_malformed_items(self):
        records, skipped = parse_records([
            jira_issue("CORE-1", "Bug"),
            {"key": "CORE-2"},
            "not an issue",
        ])

        assert [r.key for r in records] == ["CORE-1"]
        assert skipped == 2


class TestTrackerDataFetcher:
    @pytest.fixture
    def mixed_items(self):
        return [
            jira_issue("CORE-1", "Task", summary="Write docs", assignee="Ana"),
            jira_issue("CORE-2", "Bug", summary="Login fails", priority="High"),
            jira_issue("CORE-3", "Defect", summary="Typo on home page", priority=None),
            jira_issue("CORE-4", "bug", summary="Slow search", status="In Progress", priority="Low"),
            jira_issue("CORE-5", "Story", summary="User profile"),
        ]

    @pytest.fixture
    def tracker_client(self, mixed_items):
        client = Mock()
        client.get_items_by_version.return_value = mixed_items
        return client

    @pytest.fixture
    def fetcher(self, tracker_client):
        return TrackerDataFetcher(tracker_client)

    def test_bugs_count_only_bug_and_defect(self, fetcher, tracker_client):
        block = fetcher.fetch_bugs_for_version("1.4.0")

        tracker_client.get_items_by_version.assert_called_once_with("1.4.0")
        assert block.startswith("Version: 1.4.0\nTotal bugs found: 3\n\n")

    def test_each_bug_appears_once(self, fetcher):
        block = fetcher.fetch_bugs_for_version("1.4.0")

        for key in ("CORE-2", "CORE-3", "CORE-4"):
            assert block.count(f"- Key: {key}\n") == 1
        assert "CORE-1" not in block
        assert "CORE-5" not in block

    def test_bug_entry_format(self, fetcher):
        block = fetcher.fetch_bugs_for_version("1.4.0")

        assert (
            "- Key: CORE-2\n"
            "  Summary: Login fails\n"
            "  Status: Open\n"
            "  Type: Bug\n"
            "  Priority: High\n"
            "\n"
        ) in block

    def test_missing_priority_renders_none(self, fetcher):
        block = fetcher.fetch_bugs_for_version("1.4.0")
        assert "  Type: Defect\n  Priority: None\n" in block

    def test_tasks_for_version(self, fetcher):
        block = fetcher.fetch_tasks_for_version("2.0")

        assert block.startswith("Version: 2.0\nTotal tasks found: 1\n\n")
        assert (
            "- Key: CORE-1\n"
            "  Summary: Write docs\n"
            "  Status: Open\n"
            "  Assignee: Ana\n"
        ) in block

    def test_unassigned_task(self, tracker_client, fetcher):
        tracker_client.get_items_by_version.return_value = [jira_issue("WEB-1", "Task")]

        block = fetcher.fetch_tasks_for_version("2.0")

        assert "  Assignee: Unassigned\n" in block

    def test_no_matching_items(self, tracker_client, fetcher):
        tracker_client.get_items_by_version.return_value = []

        block = fetcher.fetch_bugs_for_version("9.9.9")

        assert block == "Version: 9.9.9\nTotal bugs found: 0\n\n"

    def test_unreadable_items_are_noted(self, tracker_client, fetcher):
        tracker_client.get_items_by_version.return_value = [
            jira_issue("CORE-2", "Bug"),
            {"key": "CORE-9"},
        ]

        block = fetcher.fetch_bugs_for_version("1.4.0")

        assert "Total bugs found: 1" in block
        assert "Note: 1 item(s) could not be read from the tracker." in block

    def test_null_issue_type_is_skipped(self, tracker_client, fetcher):
        no_type = jira_issue("CORE-8", "Bug")
        no_type["fields"]["issuetype"] = None
        tracker_client.get_items_by_version.return_value = [
            jira_issue("CORE-1", "Bug", summary="Valid bug"),
            no_type,
            {"key": "WEB-2", "summary": "Flat", "status": "Open", "type": None},
        ]

        block = fetcher.fetch_bugs_for_version("1.4.0")

        assert block.startswith("Version: 1.4.0\nTotal bugs found: 1\n\n")
        assert "- Key: CORE-1\n" in block
        assert "Note: 2 item(s) could not be read from the tracker." in block

    def test_tracker_errors_propagate(self, tracker_client, fetcher):
        tracker_client.get_items_by_version.side_effect = ConnectionError("jira down")

        with pytest.raises(ConnectionError):
            fetcher.fetch_bugs_for_version("1.4.0")

    def test_project_tasks_is_explanatory_note(self, tracker_client, fetcher):
        text = fetcher.fetch_tasks_for_project("CORE")

        assert text.startswith("Project: CORE\n")
        assert "not supported" in text
        tracker_client.get_items_by_version.assert_not_called()

    def test_general_is_explanatory_note(self, tracker_client, fetcher):
        text = fetcher.fetch_general('project = CORE AND status = "Open"')

        assert text.startswith('JQL Query: project = CORE AND status = "Open"\n')
        assert "not supported" in text
        tracker_client.get_items_by_version.assert_not_called()
