"""Diff section split command."""

from __future__ import annotations

import argparse
import json
from collections import Counter

from threadpatch.commands.common import load_config, read_text_input
from threadpatch.sections import build_highlight_requests, number_diff_lines, parse_unified_diff_by_file


def run(args: argparse.Namespace) -> int:
    config = load_config(args)
    text = read_text_input(args.input)
    files = parse_unified_diff_by_file(text)

    if args.json:
        payload: dict = {"files": [item.model_dump(mode="json") for item in files]}
        if args.line_numbers:
            payload["line_numbers"] = [row.model_dump(mode="json") for row in number_diff_lines(text)]
        if args.theme or args.highlight:
            requests = build_highlight_requests(files, args.theme, config.highlight)
            payload["highlight_requests"] = [request.model_dump(mode="json") for request in requests]
        print(json.dumps(payload, indent=2))
        return 0

    if not files:
        print("No diff content")
        return 0
    for item in files:
        kinds = Counter(entry.kind.value for entry in item.line_entries)
        print(
            f"{item.display_path}: lines={len(item.line_entries)} "
            f"add={kinds.get('add', 0)} del={kinds.get('del', 0)} ctx={kinds.get('ctx', 0)} "
            f"hunks={kinds.get('hunkHeader', 0)}"
        )
    return 0
