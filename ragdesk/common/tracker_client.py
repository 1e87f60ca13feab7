"""
Jira Tracker Client

Thin REST client for the Jira search API.
Only the lookups the query router needs are exposed: items tagged with a
fix version. Returned items are the raw issue dicts from the API.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger("ragdesk.common.tracker_client")

SEARCH_PATH = "/rest/api/2/search"
ISSUE_FIELDS = "summary,status,issuetype,priority,assignee"


class TrackerError(Exception):
    """Error communicating with the issue tracker."""
    pass


class JiraClient:
    """
    Synchronous Jira client over httpx.

    Authenticates with basic auth (account email + API token) when both
    are configured.
    """

    def __init__(
        self,
        base_url: str,
        email: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout: float = 30.0,
        max_results: int = 100,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize Jira client.

        Args:
            base_url: Jira site URL (e.g. https://example.atlassian.net)
            email: Account email for basic auth
            api_token: API token for basic auth
            timeout: Request timeout in seconds
            max_results: Page size for search requests
            transport: Optional httpx transport (used by tests)
        """
        if not base_url:
            raise ValueError("Jira base_url is required")

        auth = (email, api_token) if email and api_token else None
        self._base_url = base_url.rstrip("/")
        self._max_results = max_results
        self._client = httpx.Client(
            base_url=self._base_url,
            auth=auth,
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def search(self, jql: str) -> List[Dict[str, Any]]:
        """
        Run a JQL search and return every matching issue.

        Pages through results until the reported total is reached.

        Raises:
            TrackerError: on transport failures or non-2xx responses
        """
        issues: List[Dict[str, Any]] = []
        start_at = 0

        while True:
            params = {
                "jql": jql,
                "startAt": start_at,
                "maxResults": self._max_results,
                "fields": ISSUE_FIELDS,
            }
            try:
                response = self._client.get(SEARCH_PATH, params=params)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise TrackerError(
                    f"Jira search failed with HTTP {e.response.status_code}: {e.response.text[:200]}"
                ) from e
            except httpx.HTTPError as e:
                raise TrackerError(f"Could not reach Jira at {self._base_url}: {e}") from e

            data = response.json()
            page = data.get("issues", [])
            issues.extend(page)

            total = data.get("total", len(issues))
            start_at += len(page)
            if not page or start_at >= total:
                break

        logger.debug("JQL %r returned %d issue(s)", jql, len(issues))
        return issues

    def get_items_by_version(self, version: str) -> List[Dict[str, Any]]:
        """Return all issues whose fix version is the given version."""
        escaped = version.replace("\\", "\\\\").replace('"', '\\"')
        return self.search(f'fixVersion = "{escaped}"')

    def close(self) -> None:
        self._client.close()
