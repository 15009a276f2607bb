"""Normalizer tests (synchronous wrappers around asyncio.run)."""

from __future__ import annotations

import asyncio

import pytest
from conftest import FakeIssue, FakeRelation

from issuegraph.concurrency import ConcurrencyConfig
from issuegraph.normalizer import (
    get_blocked_by_issues,
    is_canceled,
    normalize_all,
    normalize_issue,
)


def test_is_canceled_by_timestamp_skips_state_lookup():
    issue = FakeIssue("ENG-1", canceled_at="2024-01-01T00:00:00Z")
    assert asyncio.run(is_canceled(issue)) is True
    assert issue.state_calls == 0


def test_is_canceled_falls_back_to_state_type():
    issue = FakeIssue("ENG-1", state_type="canceled")
    assert asyncio.run(is_canceled(issue)) is True
    assert issue.state_calls == 1


def test_is_canceled_false_for_active_issue_and_missing_state():
    assert asyncio.run(is_canceled(FakeIssue("ENG-1", state_type="started"))) is False
    assert asyncio.run(is_canceled(FakeIssue("ENG-2", state_type=None))) is False


def test_normalize_canceled_issue_returns_none():
    assert asyncio.run(normalize_issue(FakeIssue("ENG-1", state_type="canceled"))) is None


def test_normalize_keeps_only_blocks_relations():
    blocker = FakeIssue("ENG-2", estimate=3)
    related = FakeIssue("ENG-3")
    issue = FakeIssue("ENG-1", estimate=5)
    issue.relation_list = [
        FakeRelation("related", related),
        FakeRelation("blocks", blocker),
        FakeRelation("duplicate", related),
    ]

    result = asyncio.run(normalize_issue(issue))

    assert result is not None
    assert result.identifier == "ENG-1"
    assert result.label == 'ENG-1["ENG-1<br/>(5)"]'
    assert [b.identifier for b in result.blocked_by_issues] == ["ENG-2"]
    assert result.blocked_by_issues[0].label == 'ENG-2["ENG-2<br/>(3)"]'


def test_blockers_are_one_level_deep():
    deepest = FakeIssue("ENG-3")
    middle = FakeIssue("ENG-2").blocked_by(deepest)
    top = FakeIssue("ENG-1").blocked_by(middle)

    result = asyncio.run(normalize_issue(top))

    assert result is not None
    (blocker,) = result.blocked_by_issues
    assert blocker.identifier == "ENG-2"
    assert blocker.blocked_by_issues == ()


def test_unresolved_and_canceled_blockers_are_dropped():
    gone = FakeIssue("ENG-4", canceled_at="2024-02-02")
    canceled_state = FakeIssue("ENG-5", state_type="canceled")
    live = FakeIssue("ENG-6")
    issue = FakeIssue("ENG-1").blocked_by(None, gone, live, canceled_state)

    blockers = asyncio.run(get_blocked_by_issues(issue))

    assert [b.identifier for b in blockers] == ["ENG-6"]


def test_blocker_order_follows_relation_order():
    issue = FakeIssue("ENG-1").blocked_by(FakeIssue("ENG-9"), FakeIssue("ENG-3"), FakeIssue("ENG-5"))
    blockers = asyncio.run(get_blocked_by_issues(issue))
    assert [b.identifier for b in blockers] == ["ENG-9", "ENG-3", "ENG-5"]


def test_duplicate_blockers_are_tolerated():
    twin = FakeIssue("ENG-2")
    issue = FakeIssue("ENG-1").blocked_by(twin, twin)
    blockers = asyncio.run(get_blocked_by_issues(issue))
    assert [b.identifier for b in blockers] == ["ENG-2", "ENG-2"]


def test_normalize_all_drops_canceled_and_keeps_everything_else():
    issues = [
        FakeIssue("ENG-1"),
        FakeIssue("ENG-2", state_type="canceled"),
        FakeIssue("ENG-3", canceled_at="2024-03-03"),
        FakeIssue("ENG-4"),
    ]

    result = asyncio.run(normalize_all(issues, ConcurrencyConfig(max_workers=2)))

    assert sorted(i.identifier for i in result) == ["ENG-1", "ENG-4"]


def test_normalize_all_collects_in_completion_order():
    class SlowIssue(FakeIssue):
        async def relations(self):  # type: ignore[override]
            await asyncio.sleep(0.05)
            return await super().relations()

    issues = [SlowIssue("ENG-1"), FakeIssue("ENG-2")]

    result = asyncio.run(normalize_all(issues, ConcurrencyConfig(max_workers=2)))

    assert [i.identifier for i in result] == ["ENG-2", "ENG-1"]


def test_normalize_all_propagates_fetch_failures():
    class BrokenIssue(FakeIssue):
        async def relations(self):  # type: ignore[override]
            raise RuntimeError("upstream exploded")

    with pytest.raises(RuntimeError, match="upstream exploded"):
        asyncio.run(normalize_all([FakeIssue("ENG-1"), BrokenIssue("ENG-2")]))
