"""Issue types shared by the normalizer and the partitioner."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol

CANCELED_STATE_TYPE = "canceled"
BLOCKS_RELATION = "blocks"
DEFAULT_ESTIMATE = 1


class WorkflowStateLike(Protocol):
    type: str | None


class RelationLike(Protocol):
    type: str

    async def related_issue(self) -> RawIssue | None: ...


class RawIssue(Protocol):
    """What the normalizer needs from an upstream issue.

    ``state`` and ``relations`` are lazy; each call may hit the API.
    """

    identifier: str
    canceled_at: Any | None
    estimate: float | None

    async def state(self) -> WorkflowStateLike | None: ...

    async def relations(self) -> Sequence[RelationLike]: ...


def _format_estimate(estimate: float | None) -> str:
    value: float = estimate or DEFAULT_ESTIMATE
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_label(identifier: str, estimate: float | None = None) -> str:
    """Mermaid node declaration for an issue, e.g. ``ENG-1["ENG-1<br/>(3)"]``."""
    return f'{identifier}["{identifier}<br/>({_format_estimate(estimate)})"]'


@dataclass(frozen=True)
class NormalizedIssue:
    identifier: str
    label: str
    # Only direct blockers; their own blockers are always empty.
    blocked_by_issues: tuple[NormalizedIssue, ...] = ()

    @classmethod
    def create(
        cls,
        identifier: str,
        estimate: float | None = None,
        blocked_by_issues: Sequence[NormalizedIssue] = (),
    ) -> NormalizedIssue:
        return cls(
            identifier=identifier,
            label=build_label(identifier, estimate),
            blocked_by_issues=tuple(blocked_by_issues),
        )

    @property
    def is_blocked(self) -> bool:
        return bool(self.blocked_by_issues)

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "label": self.label,
            "blocked_by": [blocker.identifier for blocker in self.blocked_by_issues],
        }


__all__ = [
    "BLOCKS_RELATION",
    "CANCELED_STATE_TYPE",
    "NormalizedIssue",
    "RawIssue",
    "RelationLike",
    "WorkflowStateLike",
    "build_label",
]
