from __future__ import annotations

import base64
import json
import zlib

from issuegraph.mermaid_link import build_link, build_state, decode_state, encode_state

GRAPH = 'flowchart LR\n\nsubgraph priority\n  A-1["A-1<br/>(1)"]\nend\n'


def test_link_points_at_mermaid_live_with_pako_fragment():
    link = build_link(GRAPH)
    assert link.startswith("https://mermaid.live/edit#pako:")
    fragment = link.split("#pako:", 1)[1]
    assert "=" not in fragment
    assert "+" not in fragment and "/" not in fragment


def test_link_payload_is_zlib_json_with_graph_code():
    fragment = build_link(GRAPH, theme="forest").split("#pako:", 1)[1]
    raw = zlib.decompress(base64.urlsafe_b64decode(fragment + "=" * (-len(fragment) % 4)))
    state = json.loads(raw)
    assert state["code"] == GRAPH
    assert json.loads(state["mermaid"]) == {"theme": "forest"}
    assert state["editorMode"] == "code"
    assert state["pan"] == {"x": 0, "y": 0}


def test_default_theme_matches_editor_format():
    assert build_state(GRAPH)["mermaid"] == '{\n  "theme": "dark"\n}'


def test_decode_accepts_prefixed_payload():
    encoded = encode_state(build_state(GRAPH))
    assert decode_state("pako:" + encoded)["code"] == GRAPH
