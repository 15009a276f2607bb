from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import requests

from . import __version__
from .concurrency import run_blocking
from .config import DEFAULT_API_URL, DEFAULT_PAGE_DELAY, DEFAULT_PAGE_SIZE
from .logging import get_logger

USER_AGENT = f"issuegraph/{__version__}"
HTTP_ERROR_STATUS = 400
RELATIONS_PAGE_SIZE = 100

ISSUE_FIELDS = """
  id
  identifier
  estimate
  canceledAt
"""

PROJECT_ISSUES_QUERY = f"""
query ProjectIssues($projectId: String!, $first: Int!, $after: String) {{
  project(id: $projectId) {{
    id
    name
    issues(first: $first, after: $after) {{
      nodes {{{ISSUE_FIELDS}}}
      pageInfo {{
        hasNextPage
        endCursor
      }}
    }}
  }}
}}
"""

ISSUE_STATE_QUERY = """
query IssueState($id: String!) {
  issue(id: $id) {
    state {
      id
      name
      type
    }
  }
}
"""

ISSUE_RELATIONS_QUERY = f"""
query IssueRelations($id: String!, $first: Int!) {{
  issue(id: $id) {{
    relations(first: $first) {{
      nodes {{
        id
        type
        relatedIssue {{{ISSUE_FIELDS}}}
      }}
    }}
  }}
}}
"""


class LinearAPIError(RuntimeError):
    """Raised when the Linear GraphQL API returns an error."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        response_text: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.response_text = response_text


@dataclass
class LinearClient:
    """Minimal GraphQL client for the Linear API.

    Constructed once per run and handed to whatever needs to fetch; it holds
    the only ``requests.Session``.
    """

    api_key: str
    api_url: str = DEFAULT_API_URL
    page_size: int = DEFAULT_PAGE_SIZE
    timeout: float = 30.0
    session: requests.Session | None = None
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = self.session or requests.Session()
        # Linear personal keys are sent raw, without a "Bearer" prefix
        self._session.headers.setdefault("Authorization", self.api_key)
        self._session.headers.setdefault("Content-Type", "application/json")
        # requests.Session ships its own User-Agent
        self._session.headers["User-Agent"] = USER_AGENT

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        payload = {"query": query, "variables": variables or {}}
        response = self._session.request(
            "POST",
            self.api_url,
            json=payload,
            headers=self._session.headers,
            timeout=self.timeout,
        )
        if response.status_code >= HTTP_ERROR_STATUS:
            raise LinearAPIError(
                f"Linear API request failed with {response.status_code}",
                status=response.status_code,
                response_text=response.text,
            )
        data = response.json()
        if not isinstance(data, dict):
            raise LinearAPIError("Linear API returned a non-object payload")
        if data.get("errors"):
            raise LinearAPIError(f"GraphQL query failed: {data['errors']}")
        result = data.get("data")
        return result if isinstance(result, dict) else {}

    # ---- Queries -------------------------------------------------------
    def fetch_issue_page(self, project_id: str, after: str | None = None) -> dict[str, Any]:
        data = self.graphql(
            PROJECT_ISSUES_QUERY,
            {"projectId": project_id, "first": self.page_size, "after": after},
        )
        project = data.get("project")
        if not isinstance(project, Mapping):
            raise LinearAPIError(f"Project {project_id} not found or not accessible")
        issues = project.get("issues")
        if not isinstance(issues, Mapping):
            raise LinearAPIError(f"Project {project_id} response missing issues")
        return dict(issues)

    def fetch_issue_state(self, issue_id: str) -> WorkflowState | None:
        data = self.graphql(ISSUE_STATE_QUERY, {"id": issue_id})
        issue = data.get("issue")
        state = issue.get("state") if isinstance(issue, Mapping) else None
        if not isinstance(state, Mapping):
            return None
        return WorkflowState.from_payload(state)

    def fetch_issue_relations(self, issue_id: str) -> list[LinearRelation]:
        data = self.graphql(ISSUE_RELATIONS_QUERY, {"id": issue_id, "first": RELATIONS_PAGE_SIZE})
        issue = data.get("issue")
        relations = issue.get("relations") if isinstance(issue, Mapping) else None
        nodes = relations.get("nodes") if isinstance(relations, Mapping) else None
        out: list[LinearRelation] = []
        for node in nodes or []:
            if isinstance(node, Mapping):
                out.append(LinearRelation.from_payload(self, node))
        return out

    def project_issues(self, project_id: str) -> IssueConnection:
        """Fetch the first page of a project's issues."""
        page = self.fetch_issue_page(project_id)
        connection = IssueConnection(client=self, project_id=project_id)
        connection.absorb(page)
        return connection


@dataclass(frozen=True)
class WorkflowState:
    id: str | None
    name: str | None
    type: str | None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> WorkflowState:
        def _opt(key: str) -> str | None:
            value = payload.get(key)
            return str(value) if value is not None else None

        return cls(id=_opt("id"), name=_opt("name"), type=_opt("type"))


@dataclass
class LinearIssue:
    """An issue as listed by Linear; state and relations are fetched on demand."""

    client: LinearClient = field(repr=False)
    id: str
    identifier: str
    estimate: float | None = None
    canceled_at: str | None = None

    @classmethod
    def from_payload(cls, client: LinearClient, payload: Mapping[str, Any]) -> LinearIssue:
        estimate = payload.get("estimate")
        return cls(
            client=client,
            id=str(payload.get("id")),
            identifier=str(payload.get("identifier")),
            estimate=estimate if isinstance(estimate, (int, float)) else None,
            canceled_at=payload.get("canceledAt") or None,
        )

    async def state(self) -> WorkflowState | None:
        return await run_blocking(self.client.fetch_issue_state, self.id)

    async def relations(self) -> list[LinearRelation]:
        return await run_blocking(self.client.fetch_issue_relations, self.id)


@dataclass
class LinearRelation:
    type: str
    _related: LinearIssue | None = None

    @classmethod
    def from_payload(cls, client: LinearClient, payload: Mapping[str, Any]) -> LinearRelation:
        related = payload.get("relatedIssue")
        return cls(
            type=str(payload.get("type")),
            _related=(
                LinearIssue.from_payload(client, related) if isinstance(related, Mapping) else None
            ),
        )

    async def related_issue(self) -> LinearIssue | None:
        return self._related


@dataclass
class IssueConnection:
    """Paginated issue list; ``fetch_next`` appends the next page to ``nodes``."""

    client: LinearClient = field(repr=False)
    project_id: str
    nodes: list[LinearIssue] = field(default_factory=list)
    has_next_page: bool = False
    end_cursor: str | None = None

    def absorb(self, page: Mapping[str, Any]) -> None:
        for node in page.get("nodes") or []:
            if isinstance(node, Mapping):
                self.nodes.append(LinearIssue.from_payload(self.client, node))
        page_info = page.get("pageInfo")
        page_info = page_info if isinstance(page_info, Mapping) else {}
        self.has_next_page = bool(page_info.get("hasNextPage"))
        cursor = page_info.get("endCursor")
        self.end_cursor = str(cursor) if cursor else None

    def fetch_next(self) -> None:
        if not self.has_next_page:
            return
        page = self.client.fetch_issue_page(self.project_id, after=self.end_cursor)
        self.absorb(page)


async def fetch_all_issues(
    connection: IssueConnection, *, delay: float = DEFAULT_PAGE_DELAY
) -> list[LinearIssue]:
    """Walk every page sequentially, pausing between requests.

    Issues with a ``canceledAt`` timestamp are dropped here; the normalizer
    still re-checks the workflow state for the ones that slip through.
    """
    logger = get_logger()
    logger.info(f"  - {len(connection.nodes)}", page_nodes=len(connection.nodes))
    while connection.has_next_page:
        # don't hammer the Linear API
        await asyncio.sleep(delay)
        await run_blocking(connection.fetch_next)
        logger.info(f"  - {len(connection.nodes)}", page_nodes=len(connection.nodes))
    return [issue for issue in connection.nodes if not issue.canceled_at]


__all__ = [
    "IssueConnection",
    "LinearAPIError",
    "LinearClient",
    "LinearIssue",
    "LinearRelation",
    "WorkflowState",
    "fetch_all_issues",
]
