"""
Tracker Data Fetcher

Fetches issue-tracker items and formats them into the text block the
language model sees as context.

Version lookups return every item tagged with the version; filtering by
issue type happens here, client-side.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger("ragdesk.retriever.tracker_fetcher")

BUG_TYPES = ("bug", "defect")
TASK_TYPES = ("task",)


@dataclass(frozen=True)
class TrackerRecord:
    """One issue-tracker item"""
    key: str
    summary: str
    status: str
    issue_type: str
    priority: Optional[str] = None
    assignee: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "TrackerRecord":
        """
        Build a record from a raw tracker item.

        Accepts the Jira REST shape ({"key": ..., "fields": {...}}) and a
        flat dict with the same field names as this class.

        Raises:
            KeyError, TypeError, AttributeError: if the item is malformed
        """
        if "fields" in raw:
            fields = raw["fields"]
            return cls(
                key=raw["key"],
                summary=fields.get("summary") or "",
                status=_required_name(fields["status"], "status"),
                issue_type=_required_name(fields["issuetype"], "issuetype"),
                priority=_name(fields.get("priority")),
                assignee=_display_name(fields.get("assignee")),
            )

        return cls(
            key=raw["key"],
            summary=raw.get("summary") or "",
            status=_required_name(raw["status"], "status"),
            issue_type=_required_name(raw.get("issue_type") or raw["type"], "type"),
            priority=_name(raw.get("priority")),
            assignee=_display_name(raw.get("assignee")),
        )

    def is_type(self, type_names: Iterable[str]) -> bool:
        """Case-insensitive issue type check"""
        return self.issue_type.lower() in type_names


def _name(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, dict):
        return value["name"]
    return str(value)


def _required_name(value: Any, field_name: str) -> str:
    name = _name(value)
    if name is None:
        raise TypeError(f"missing {field_name}")
    return name


def _display_name(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, dict):
        return value.get("displayName") or value["name"]
    return str(value)


def parse_records(raw_items: Iterable[Dict[str, Any]]) -> Tuple[List[TrackerRecord], int]:
    """
    Convert raw tracker items into records.

    Malformed items are logged and skipped.

    Returns:
        (records, number of skipped items)
    """
    records = []
    skipped = 0
    for raw in raw_items:
        try:
            records.append(TrackerRecord.from_raw(raw))
        except (KeyError, TypeError, AttributeError) as e:
            skipped += 1
            logger.warning("Skipping unreadable tracker item: %s", e)
    return records, skipped


def format_bug_entry(record: TrackerRecord) -> str:
    return (
        f"- Key: {record.key}\n"
        f"  Summary: {record.summary}\n"
        f"  Status: {record.status}\n"
        f"  Type: {record.issue_type}\n"
        f"  Priority: {record.priority or 'None'}\n"
    )


def format_task_entry(record: TrackerRecord) -> str:
    return (
        f"- Key: {record.key}\n"
        f"  Summary: {record.summary}\n"
        f"  Status: {record.status}\n"
        f"  Assignee: {record.assignee or 'Unassigned'}\n"
    )


def _format_block(version: str, label: str, entries: List[str], skipped: int) -> str:
    lines = [
        f"Version: {version}\n",
        f"Total {label} found: {len(entries)}\n\n",
    ]
    for entry in entries:
        lines.append(entry + "\n")
    if skipped:
        lines.append(f"Note: {skipped} item(s) could not be read from the tracker.\n")
    return "".join(lines)


class TrackerDataFetcher:
    """
    Turns tracker lookups into formatted context blocks.

    The tracker client only exposes "items by version"; project and free
    JQL lookups return an explanatory note instead of data.
    """

    def __init__(self, tracker_client):
        """
        Args:
            tracker_client: Object with get_items_by_version(version) -> raw items
        """
        self._client = tracker_client

    def fetch_bugs_for_version(self, version: str) -> str:
        """Bugs and defects tagged with a version"""
        logger.info("Fetching bugs for version: %s", version)

        records, skipped = parse_records(self._client.get_items_by_version(version))
        bugs = [r for r in records if r.is_type(BUG_TYPES)]

        return _format_block(version, "bugs", [format_bug_entry(b) for b in bugs], skipped)

    def fetch_tasks_for_version(self, version: str) -> str:
        """Tasks tagged with a version"""
        logger.info("Fetching tasks for version: %s", version)

        records, skipped = parse_records(self._client.get_items_by_version(version))
        tasks = [r for r in records if r.is_type(TASK_TYPES)]

        return _format_block(version, "tasks", [format_task_entry(t) for t in tasks], skipped)

    def fetch_tasks_for_project(self, project: str) -> str:
        # No project-level query on the tracker client
        return (
            f"Project: {project}\n"
            "Note: Direct project task querying is not supported by the tracker client yet."
        )

    def fetch_general(self, jql: str) -> str:
        # No free JQL query on the tracker client
        return (
            f"JQL Query: {jql}\n"
            "Note: Direct JQL querying is not supported by the tracker client yet."
        )
