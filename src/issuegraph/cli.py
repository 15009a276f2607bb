"""issuegraph CLI.

Subcommands:
  graph   -> render the dependency flowchart of a Linear project
  doctor  -> check API key and configuration without touching the network
  setup   -> write a sample .env file

The graph itself is written to stdout so it can be piped; progress logging,
separators and the mermaid.live link go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import requests

from issuegraph.config import CONFIG_DEFAULT, ConfigError, GraphConfig, load_config
from issuegraph.env_auth import EnvAuthConfig, create_env_auth_manager
from issuegraph.errors import classify_error
from issuegraph.linear_client import LinearAPIError, LinearClient
from issuegraph.logging import StructuredLogger, configure_logging, get_logger
from issuegraph.orchestrator import GraphResult, process_project_issues
from issuegraph.ux import print_error, print_success, print_warning

EXIT_CONFIG_ERROR = 2
_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog="issuegraph", description="Linear project dependency graphs for mermaid"
    )
    p.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress informational logging (env: ISSUEGRAPH_QUIET=1)",
    )
    p.add_argument("--json-logs", action="store_true", help="Emit log lines as JSON")
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    pg = sub.add_parser("graph", help="Render the dependency graph of a project")
    pg.add_argument("project_id", help="Linear project id")
    pg.add_argument(
        "--show-actionable",
        action="store_true",
        help="Include unblocked issues that do not block anything",
    )
    pg.add_argument("--sort", action="store_true", help="Sort issues by identifier")
    pg.add_argument("--config", help=f"YAML config file (default: {CONFIG_DEFAULT} if present)")
    pg.add_argument("--concurrency", type=int, help="Issues normalized in parallel")
    pg.add_argument("--no-link", action="store_true", help="Skip the mermaid.live link")
    pg.add_argument("--output", help="Also write the graph to this file")
    pg.add_argument(
        "--json", action="store_true", help="Print issues, sections, graph and link as JSON"
    )

    doc = sub.add_parser("doctor", help="Check API key and configuration")
    doc.add_argument("--config", help=f"YAML config file (default: {CONFIG_DEFAULT} if present)")

    setup = sub.add_parser("setup", help="Setup authentication")
    setup.add_argument("--create-env", action="store_true", help="Create sample .env file")
    setup.add_argument("--path", default=".env", help="Where to write the sample .env")
    return p


def _load_cfg(args: argparse.Namespace) -> GraphConfig:
    explicit = getattr(args, "config", None)
    return load_config(explicit or CONFIG_DEFAULT, required=bool(explicit))


def _apply_overrides(cfg: GraphConfig, args: argparse.Namespace) -> GraphConfig:
    if args.show_actionable:
        cfg.show_actionable = True
    if args.sort:
        cfg.sort_issues = True
    if args.no_link:
        cfg.link_enabled = False
    if args.concurrency is not None:
        if args.concurrency < 1:
            raise ConfigError("--concurrency must be at least 1")
        cfg.max_workers = args.concurrency
    return cfg


def _configure_from_cfg(cfg: GraphConfig, args: argparse.Namespace) -> StructuredLogger:
    """Let the config file adjust logging unless the command line already did."""
    if cfg.source_file is None or args.quiet:
        return get_logger()
    return configure_logging(
        json_logging=args.json_logs or cfg.logging_json_enabled,
        level=cfg.logging_level,
    )


def _print_lines(lines: Iterable[str], stream: Any = None) -> None:
    for line in lines:
        print(line, file=stream or sys.stderr)


def _emit_result(result: GraphResult, args: argparse.Namespace) -> None:
    if args.json:
        payload = {
            "project_id": result.project_id,
            "issues": [issue.to_dict() for issue in result.issues],
            "sections": result.description.to_dict(),
            "graph": result.graph,
            "link": result.link,
            "stats": result.stats,
        }
        print(json.dumps(payload, indent=2))
    else:
        if not args.quiet:
            print("\n------\n", file=sys.stderr)
        sys.stdout.write(result.graph)
        sys.stdout.flush()
        if not args.quiet:
            print("------\n", file=sys.stderr)
        if result.link:
            print(result.link, file=sys.stderr)
    if args.output:
        Path(args.output).write_text(result.graph, encoding="utf-8")


def _cmd_graph(args: argparse.Namespace) -> int:
    try:
        cfg = _apply_overrides(_load_cfg(args), args)
        logger = _configure_from_cfg(cfg, args)
        auth = create_env_auth_manager(EnvAuthConfig.from_graph_config(cfg))
        api_key = auth.require_api_key()
    except ConfigError as exc:
        print_error(str(exc))
        return EXIT_CONFIG_ERROR

    client = LinearClient(
        api_key=api_key,
        api_url=cfg.api_url,
        page_size=cfg.page_size,
        timeout=cfg.request_timeout,
    )
    try:
        result = asyncio.run(process_project_issues(client, args.project_id, cfg))
    except (LinearAPIError, requests.RequestException) as exc:
        info = classify_error(exc)
        logger.log_error(
            "failed to build graph", error=info.message, category=info.category
        )
        print_error(f"{info.category}: {info.message}")
        return 1

    _emit_result(result, args)
    return 0


def _cmd_doctor(args: argparse.Namespace) -> int:
    problems: list[str] = []
    warnings: list[str] = []
    cfg: GraphConfig | None = None
    try:
        cfg = _load_cfg(args)
    except ConfigError as exc:
        problems.append(str(exc))
    if cfg is not None:
        source = cfg.source_file or "defaults"
        _print_lines(
            [
                f"[doctor] config: {source}",
                f"[doctor] api url: {cfg.api_url}",
                f"[doctor] concurrency: {cfg.max_workers}",
            ]
        )
        auth = create_env_auth_manager(EnvAuthConfig.from_graph_config(cfg))
        key = auth.get_api_key()
        state = "present" if key else "missing"
        print(f"[doctor] api key ({cfg.api_key_var}): {state}", file=sys.stderr)
        if not key:
            problems.append(f'Environment Variable "{cfg.api_key_var}" not found.')
            warnings.extend(auth.get_authentication_recommendations())

    if warnings:
        print_warning(f"{len(warnings)} recommendation(s):")
        _print_lines(f"  • {w}" for w in warnings)
    if problems:
        print_error(f"{len(problems)} problem(s) detected:")
        _print_lines(f"  • {p}" for p in problems)
        return EXIT_CONFIG_ERROR
    print_success("All checks passed!")
    return 0


def _cmd_setup(args: argparse.Namespace) -> int:
    auth_manager = create_env_auth_manager(EnvAuthConfig(load_dotenv=False))
    if args.create_env:
        if auth_manager.create_sample_env_file(args.path):
            print_success(f"[setup] Created sample {args.path} file")
        else:
            print_warning(f"[setup] {args.path} already exists; left untouched")
        return 0
    _print_lines(
        [
            "[setup] Use --help to see available setup options",
            "Available options:",
            "  --create-env    Create sample .env file",
        ]
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.quiet and os.environ.get("ISSUEGRAPH_QUIET") == "1":
        args.quiet = True
    configure_logging(
        json_logging=args.json_logs or os.environ.get("ISSUEGRAPH_JSON_LOGS") == "1",
        level="WARNING" if args.quiet else os.environ.get("ISSUEGRAPH_LOG_LEVEL", "INFO"),
    )
    handlers = {
        "graph": lambda: _cmd_graph(args),
        "doctor": lambda: _cmd_doctor(args),
        "setup": lambda: _cmd_setup(args),
    }
    handler = handlers.get(args.cmd)
    if handler is None:  # pragma: no cover - argparse enforces valid choices
        parser.print_help()
        return 1
    return int(handler())


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
