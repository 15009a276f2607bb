"""Fetch -> normalize -> partition for one Linear project.

The orchestrator owns no I/O of its own beyond logging: the Linear client is
injected, and the caller decides where the graph and link are written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .concurrency import ConcurrencyConfig, run_blocking
from .config import GraphConfig, default_config
from .linear_client import LinearClient, fetch_all_issues
from .logging import get_logger
from .mermaid_link import build_link
from .models import NormalizedIssue
from .normalizer import normalize_all
from .partitioner import GraphDescription, partition, render_graph, sort_issues


@dataclass
class GraphResult:
    project_id: str
    issues: list[NormalizedIssue]
    description: GraphDescription
    graph: str
    link: str | None = None
    fetched_count: int = 0
    stats: dict[str, Any] = field(default_factory=dict)


def build_result(
    project_id: str,
    issues: list[NormalizedIssue],
    cfg: GraphConfig,
    *,
    fetched_count: int | None = None,
) -> GraphResult:
    """Partition an already-normalized set and render it."""
    ordered = sort_issues(issues) if cfg.sort_issues else list(issues)
    description = partition(ordered, cfg.show_actionable, direction=cfg.direction)
    graph = render_graph(description)
    link = build_link(graph, cfg.link_theme) if cfg.link_enabled else None
    stats = {
        "normalized": len(ordered),
        "edges": len(description.edges),
        "priority": len(description.priority),
        "external_blocked_by": len(description.external_blocked_by),
    }
    if description.actionable is not None:
        stats["actionable"] = len(description.actionable)
    return GraphResult(
        project_id=project_id,
        issues=ordered,
        description=description,
        graph=graph,
        link=link,
        fetched_count=len(issues) if fetched_count is None else fetched_count,
        stats=stats,
    )


async def process_project_issues(
    client: LinearClient, project_id: str, cfg: GraphConfig | None = None
) -> GraphResult:
    cfg = cfg or default_config()
    logger = get_logger()

    logger.info("! fetching issues", operation="fetch_issues", project_id=project_id)
    with logger.timed_operation("fetch_issues", project_id=project_id):
        connection = await run_blocking(client.project_issues, project_id)
        raw_issues = await fetch_all_issues(connection, delay=cfg.page_delay)

    logger.info("! determining workflow", operation="normalize", issue_count=len(raw_issues))
    with logger.timed_operation("normalize", issue_count=len(raw_issues)):
        normalized = await normalize_all(raw_issues, ConcurrencyConfig(cfg.max_workers))

    logger.info("! building graph", operation="build_graph", issue_count=len(normalized))
    return build_result(project_id, normalized, cfg, fetched_count=len(raw_issues))


__all__ = ["GraphResult", "build_result", "process_project_issues"]
