"""Command-line interface for Email Query Engine.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

import structlog

from email_query_engine.config import get_settings
from email_query_engine.exceptions import ConfigurationError, EmailQueryError
from email_query_engine.filters import matching_rules, parse_rules
from email_query_engine.query import MessageQueryEngine
from email_query_engine.store import load_snapshot

logger = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="email-query", description="Email Query Engine")
    subparsers = parser.add_subparsers(dest="command", required=True)

    query_parser = subparsers.add_parser("query", help="Run a message list query against a snapshot")
    query_parser.add_argument(
        "--snapshot",
        type=Path,
        required=True,
        help="Path to a JSON snapshot with 'visibility' and 'messages'",
    )
    query_parser.add_argument("--principal", required=True, help="Requesting user")
    query_parser.add_argument(
        "--request",
        default="{}",
        help="Query arguments as JSON (default: {})",
    )

    rules_parser = subparsers.add_parser("rules", help="List the rules matching each snapshot message")
    rules_parser.add_argument(
        "--snapshot",
        type=Path,
        required=True,
        help="Path to a JSON snapshot with 'visibility' and 'messages'",
    )
    rules_parser.add_argument(
        "--rules",
        type=Path,
        required=True,
        help="Path to a JSON list of rules",
    )

    return parser


def _load_json(text: str, what: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid {what} JSON: {exc}") from exc


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=False))


async def _cmd_query(args: argparse.Namespace) -> int:
    snapshot = load_snapshot(args.snapshot)
    request = _load_json(args.request, "request")

    engine = MessageQueryEngine(
        store=snapshot.store,
        text_index=snapshot.text_index,
        visibility=snapshot.visibility,
        settings=get_settings(),
    )
    result = await engine.query(args.principal, request)
    _print_json(result.to_response())
    return 0


def _cmd_rules(args: argparse.Namespace) -> int:
    snapshot = load_snapshot(args.snapshot)
    if not args.rules.exists():
        raise ConfigurationError(f"Rules file not found: {args.rules}")
    rules = parse_rules(_load_json(args.rules.read_text(encoding="utf-8"), "rules"))

    report = {
        view.id: [rule.id for rule in matching_rules(rules, view)]
        for view in snapshot.store.views()
    }
    _print_json(report)
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Email Query Engine CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, 1 for a query or input error).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()

    # Configure logging; stdout carries the JSON result.
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )

    logger.info("email_query_engine_started", version="0.1.0", debug=settings.debug)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    try:
        if parsed.command == "query":
            return asyncio.run(_cmd_query(parsed))
        if parsed.command == "rules":
            return _cmd_rules(parsed)
    except EmailQueryError as exc:
        _print_json({"error": exc.to_error_response()})
        return 1

    logger.error("unknown_command", command=parsed.command)
    return 2


if __name__ == "__main__":
    sys.exit(main())
