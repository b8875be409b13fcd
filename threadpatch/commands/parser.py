"""CLI parser construction."""

from __future__ import annotations

import argparse

from threadpatch.commands.common import add_common_config_flags


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Merge and render patches resent across mailing-list threads")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument(
        "--debug-module",
        action="append",
        default=[],
        help="Logger name forced to DEBUG, e.g. threadpatch.merge (repeatable)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    merge = sub.add_parser("merge", aliases=["aggregate"], help="Merge every patch of a thread into one diff per file")
    merge.add_argument("--input", required=True, help="Path to JSON array of thread messages (or patches with --patches)")
    merge.add_argument(
        "--patches",
        action="store_true",
        help="Treat input as a JSON array of {content, date} patches instead of messages",
    )
    merge.add_argument("--output-dir", default="./threadpatch-out", help="Output directory")
    add_common_config_flags(merge)

    sections = sub.add_parser("sections", aliases=["split"], help="Split a diff into classified per-file sections")
    sections.add_argument("--input", required=True, help="Path to a diff file, or - for stdin")
    sections.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    sections.add_argument("--line-numbers", action="store_true", help="Include old/new line numbers (JSON output)")
    sections.add_argument(
        "--theme",
        choices=["light", "dark"],
        default=None,
        help="Also emit highlight requests for this theme (JSON output)",
    )
    sections.add_argument(
        "--highlight",
        action="store_true",
        help="Emit highlight requests using highlight.default_theme unless --theme is given (JSON output)",
    )
    add_common_config_flags(sections)

    serve = sub.add_parser("serve", aliases=["serve-api"], help="Run the HTTP API")
    serve.add_argument("--host", default=None, help="Bind host (defaults to server.host)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (defaults to server.port)")
    serve.add_argument("--reload", action="store_true", help="Enable uvicorn auto-reload (development only)")
    add_common_config_flags(serve)

    return parser
