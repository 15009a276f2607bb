"""Partition normalized issues into the sections of the dependency flowchart.

Sections, in emission order:

- ``actionable``: unblocked and not blocking anything in view (opt-in)
- ``priority``: unblocked and blocking at least one issue in view
- ``external-blocked-by``: blockers that are not part of the fetched set
- ``blocked``: one ``blocker --> issue`` edge per direct blocker

Line order within a section follows the order of the input sequence.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .models import NormalizedIssue

ACTIONABLE = "actionable"
PRIORITY = "priority"
EXTERNAL_BLOCKED_BY = "external-blocked-by"
BLOCKED = "blocked"


@dataclass(frozen=True)
class GraphDescription:
    priority: list[str] = field(default_factory=list)
    external_blocked_by: list[str] = field(default_factory=list)
    blocked: list[str] = field(default_factory=list)
    # None when the actionable section was not requested
    actionable: list[str] | None = None
    edges: list[tuple[str, str]] = field(default_factory=list)
    direction: str = "LR"

    def sections(self) -> list[tuple[str, list[str]]]:
        out: list[tuple[str, list[str]]] = []
        if self.actionable is not None:
            out.append((ACTIONABLE, self.actionable))
        out.append((PRIORITY, self.priority))
        out.append((EXTERNAL_BLOCKED_BY, self.external_blocked_by))
        out.append((BLOCKED, self.blocked))
        return out

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {name: list(lines) for name, lines in self.sections()}
        payload["edges"] = [list(edge) for edge in self.edges]
        return payload


def build_blocking_list(issues: Sequence[NormalizedIssue]) -> list[str]:
    """Identifiers that block at least one issue, first-seen order, no duplicates."""
    seen: dict[str, None] = {}
    for issue in issues:
        for blocker in issue.blocked_by_issues:
            seen.setdefault(blocker.identifier, None)
    return list(seen)


def graph_actionable(issues: Sequence[NormalizedIssue], blocking_list: Sequence[str]) -> list[str]:
    blocking = set(blocking_list)
    return [
        issue.label
        for issue in issues
        if not issue.is_blocked and issue.identifier not in blocking
    ]


def graph_priority(issues: Sequence[NormalizedIssue], blocking_list: Sequence[str]) -> list[str]:
    blocking = set(blocking_list)
    return [
        issue.label for issue in issues if not issue.is_blocked and issue.identifier in blocking
    ]


def graph_external(issues: Sequence[NormalizedIssue]) -> list[str]:
    # One line per external blocker, even when it blocks several issues
    known = {issue.identifier for issue in issues}
    lines: dict[str, str] = {}
    for issue in issues:
        for blocker in issue.blocked_by_issues:
            if blocker.identifier in known:
                continue
            lines.setdefault(blocker.identifier, blocker.label)
    return list(lines.values())


def graph_blocked(issues: Sequence[NormalizedIssue]) -> list[str]:
    return [
        f"{blocker.label} --> {issue.label}"
        for issue in issues
        for blocker in issue.blocked_by_issues
    ]


def partition(
    issues: Sequence[NormalizedIssue],
    show_actionable: bool = False,
    *,
    direction: str = "LR",
) -> GraphDescription:
    blocking_list = build_blocking_list(issues)
    return GraphDescription(
        actionable=graph_actionable(issues, blocking_list) if show_actionable else None,
        priority=graph_priority(issues, blocking_list),
        external_blocked_by=graph_external(issues),
        blocked=graph_blocked(issues),
        edges=[
            (blocker.identifier, issue.identifier)
            for issue in issues
            for blocker in issue.blocked_by_issues
        ],
        direction=direction,
    )


def render_graph(description: GraphDescription) -> str:
    graph = f"flowchart {description.direction}\n"
    for name, lines in description.sections():
        graph += f"\nsubgraph {name}\n"
        for line in lines:
            graph += f"  {line}\n"
        graph += "end\n"
    return graph


def build_graph(
    issues: Sequence[NormalizedIssue],
    show_actionable: bool = False,
    *,
    direction: str = "LR",
) -> str:
    return render_graph(partition(issues, show_actionable, direction=direction))


def sort_issues(issues: Sequence[NormalizedIssue]) -> list[NormalizedIssue]:
    """Order issues by identifier so repeated runs render identical text."""
    return sorted(issues, key=lambda issue: _identifier_key(issue.identifier))


def _identifier_key(identifier: str) -> tuple[str, int, str]:
    # "ENG-10" sorts after "ENG-9"
    prefix, sep, number = identifier.rpartition("-")
    if sep and number.isdigit():
        return (prefix, int(number), identifier)
    return (identifier, -1, identifier)


__all__ = [
    "ACTIONABLE",
    "BLOCKED",
    "EXTERNAL_BLOCKED_BY",
    "GraphDescription",
    "PRIORITY",
    "build_blocking_list",
    "build_graph",
    "partition",
    "render_graph",
    "sort_issues",
]
