"""Turn raw Linear issues into ``NormalizedIssue`` records.

Cancelled issues are dropped entirely, both at the top level and as blockers.
Blockers are recorded one level deep only; the full chain is recovered by the
partitioner from the top-level set.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

from .concurrency import ConcurrencyConfig, create_concurrent_processor
from .models import BLOCKS_RELATION, CANCELED_STATE_TYPE, NormalizedIssue, RawIssue


async def is_canceled(issue: RawIssue) -> bool:
    if issue.canceled_at:
        return True

    # canceledAt is sometimes missing on issues that are in a canceled state,
    # so the workflow state is always consulted as well
    state = await issue.state()
    return state is not None and state.type == CANCELED_STATE_TYPE


async def _normalize_blocker(issue: RawIssue) -> NormalizedIssue | None:
    if await is_canceled(issue):
        return None
    return NormalizedIssue.create(issue.identifier, issue.estimate)


async def get_blocked_by_issues(issue: RawIssue) -> tuple[NormalizedIssue, ...]:
    relations = await issue.relations()
    blocking = [relation for relation in relations if relation.type == BLOCKS_RELATION]
    related = await asyncio.gather(*(relation.related_issue() for relation in blocking))
    resolved = [candidate for candidate in related if candidate is not None]
    blockers = await asyncio.gather(*(_normalize_blocker(candidate) for candidate in resolved))
    return tuple(blocker for blocker in blockers if blocker is not None)


async def normalize_issue(issue: RawIssue) -> NormalizedIssue | None:
    if await is_canceled(issue):
        return None

    blocked_by_issues = await get_blocked_by_issues(issue)
    return NormalizedIssue.create(issue.identifier, issue.estimate, blocked_by_issues)


async def normalize_all(
    issues: Iterable[RawIssue], config: ConcurrencyConfig | None = None
) -> list[NormalizedIssue]:
    """Normalize every issue through the bounded pool.

    Results come back in completion order, not input order.
    """
    processor = create_concurrent_processor(config)
    return await processor.process(list(issues), normalize_issue)


__all__ = ["get_blocked_by_issues", "is_canceled", "normalize_all", "normalize_issue"]
