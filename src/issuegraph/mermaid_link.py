"""Shareable mermaid.live links.

mermaid.live reads its editor state from the URL fragment as
``pako:<base64url(zlib(json))>``.
"""

from __future__ import annotations

import base64
import json
import zlib
from typing import Any

MERMAID_LIVE_URL = "https://mermaid.live/edit"
PAKO_PREFIX = "pako:"


def build_state(graph: str, theme: str = "dark") -> dict[str, Any]:
    return {
        "code": graph,
        "mermaid": json.dumps({"theme": theme}, indent=2),
        "autoSync": True,
        "updateDiagram": True,
        "panZoom": True,
        "pan": {"x": 0, "y": 0},
        "zoom": 1,
        "updateEditor": False,
        "editorMode": "code",
        "rough": False,
    }


def encode_state(state: dict[str, Any]) -> str:
    data = json.dumps(state, separators=(",", ":")).encode("utf-8")
    compressed = zlib.compress(data, 9)
    return base64.urlsafe_b64encode(compressed).decode("ascii").rstrip("=")


def decode_state(payload: str) -> dict[str, Any]:
    if payload.startswith(PAKO_PREFIX):
        payload = payload[len(PAKO_PREFIX):]
    padded = payload + "=" * (-len(payload) % 4)
    raw = zlib.decompress(base64.urlsafe_b64decode(padded))
    state = json.loads(raw.decode("utf-8"))
    if not isinstance(state, dict):
        raise ValueError("mermaid.live state must be a JSON object")
    return state


def build_link(graph: str, theme: str = "dark") -> str:
    return f"{MERMAID_LIVE_URL}#{PAKO_PREFIX}{encode_state(build_state(graph, theme))}"


__all__ = ["build_link", "build_state", "decode_state", "encode_state"]
