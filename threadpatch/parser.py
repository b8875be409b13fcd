"""Unified diff parsing into per-file hunk lists."""

from __future__ import annotations

import logging
import re

from unidiff import PatchSet
from unidiff.errors import UnidiffParseError

from threadpatch.extract import extract_diff_blocks
from threadpatch.models import FileDiff, Hunk

_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_NULL_PATH = "/dev/null"
logger = logging.getLogger(__name__)


def parse_hunk_header(line: str) -> tuple[int, int, int, int] | None:
    """Return ``(old_start, old_lines, new_start, new_lines)`` for a hunk header.

    Omitted counts default to 1. Anything after the closing ``@@`` is ignored.
    """
    match = _HUNK_HEADER_RE.match(line)
    if not match:
        return None
    old_start, old_count, new_start, new_count = match.groups()
    return (
        int(old_start),
        int(old_count) if old_count is not None else 1,
        int(new_start),
        int(new_count) if new_count is not None else 1,
    )


def _strip_side_prefix(path: str) -> str:
    if path.startswith("b/") or path.startswith("a/"):
        return path[2:]
    return path


def resolve_path(source_file: str | None, target_file: str | None) -> str:
    for candidate in (target_file, source_file):
        if candidate and candidate != _NULL_PATH:
            return _strip_side_prefix(candidate)
    return "unknown"


def _hunk_lines(hunk) -> list[str]:
    lines: list[str] = []
    old_seen = 0
    new_seen = 0
    for line in hunk:
        line_type = line.line_type or " "
        complete = old_seen >= hunk.source_length and new_seen >= hunk.target_length
        if complete and line_type != "\\":
            # blank lines trailing a complete hunk
            continue
        value = line.value
        if value.endswith("\n"):
            value = value[:-1]
        lines.append(f"{line_type}{value}")
        if line_type in (" ", "-"):
            old_seen += 1
        if line_type in (" ", "+"):
            new_seen += 1
    return lines


def parse_diff_block(block: str) -> list[FileDiff]:
    """Parse one ``diff --git`` block; never raises.

    Blocks the parser rejects yield no files. Files without hunks (mode
    changes, stat-only sections) are dropped.
    """
    try:
        patch = PatchSet.from_string(block)
    except (UnidiffParseError, IndexError, ValueError) as exc:
        logger.warning("Skipping unparseable diff block: %s", exc)
        return []

    results: list[FileDiff] = []
    for patched_file in patch:
        if not len(patched_file):
            continue
        hunks = [
            Hunk(
                old_start=hunk.source_start,
                old_lines=hunk.source_length,
                new_start=hunk.target_start,
                new_lines=hunk.target_length,
                lines=_hunk_lines(hunk),
            )
            for hunk in patched_file
        ]
        results.append(FileDiff(path=resolve_path(patched_file.source_file, patched_file.target_file), hunks=hunks))
    return results


def parse_diff_content(content: str) -> list[FileDiff]:
    """Extract every diff block from ``content`` and parse each independently."""
    results: list[FileDiff] = []
    blocks = extract_diff_blocks(content)
    for block in blocks:
        results.extend(parse_diff_block(block))
    logger.debug("Parsed %s file diffs from %s blocks", len(results), len(blocks))
    return results
