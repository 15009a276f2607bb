"""issuegraph - dependency flowcharts for Linear projects.

High-level public API:

from issuegraph import LinearClient, process_project_issues

client = LinearClient(api_key=...)
result = asyncio.run(process_project_issues(client, "project-id"))
print(result.graph)
print(result.link)

The pure pieces (``normalize_issue``, ``partition``, ``build_graph``,
``build_link``) can be used without talking to Linear at all.
"""

from __future__ import annotations

# Defined before the submodule imports; linear_client reads it for its User-Agent
__version__ = "0.2.0"

from .config import ConfigError, GraphConfig, load_config  # noqa: E402
from .linear_client import LinearAPIError, LinearClient  # noqa: E402
from .mermaid_link import build_link  # noqa: E402
from .models import NormalizedIssue, build_label  # noqa: E402
from .normalizer import normalize_all, normalize_issue  # noqa: E402
from .orchestrator import GraphResult, process_project_issues  # noqa: E402
from .partitioner import GraphDescription, build_graph, partition  # noqa: E402

__all__ = [
    "ConfigError",
    "GraphConfig",
    "GraphDescription",
    "GraphResult",
    "LinearAPIError",
    "LinearClient",
    "NormalizedIssue",
    "build_graph",
    "build_label",
    "build_link",
    "load_config",
    "normalize_all",
    "normalize_issue",
    "partition",
    "process_project_issues",
    "__version__",
]
