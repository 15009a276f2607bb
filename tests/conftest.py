"""Pytest configuration for issuegraph tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install, and provides in-memory fakes of the
Linear issue objects the normalizer consumes.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Ensure pytest-asyncio plugin is loaded explicitly so @pytest.mark.asyncio tests run
pytest_plugins = ["pytest_asyncio"]


@dataclass
class FakeState:
    type: str | None


@dataclass
class FakeRelation:
    type: str
    target: FakeIssue | None

    async def related_issue(self) -> FakeIssue | None:
        return self.target


@dataclass
class FakeIssue:
    identifier: str
    estimate: float | None = None
    canceled_at: str | None = None
    state_type: str | None = "started"
    relation_list: list[FakeRelation] = field(default_factory=list)
    state_calls: int = 0

    async def state(self) -> FakeState | None:
        self.state_calls += 1
        if self.state_type is None:
            return None
        return FakeState(self.state_type)

    async def relations(self) -> list[FakeRelation]:
        return list(self.relation_list)

    def blocked_by(self, *issues: FakeIssue | None) -> FakeIssue:
        for issue in issues:
            self.relation_list.append(FakeRelation("blocks", issue))
        return self


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for var in ("LINEAR_API_KEY", "LINEAR_TOKEN", "LINEAR_ACCESS_TOKEN", "ISSUEGRAPH_QUIET"):
        # setenv first so teardown also undoes values loaded from .env files
        monkeypatch.setenv(var, "placeholder")
        monkeypatch.delenv(var)
    monkeypatch.chdir(tmp_path)
