"""Chronological hunk merging across revised patches of one thread."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from threadpatch.models import Hunk, MergedFile, PatchInput, TrackedHunk
from threadpatch.parser import parse_diff_content

logger = logging.getLogger(__name__)


def hunks_overlap(first: Hunk, second: Hunk) -> bool:
    """True when the inclusive new-file ranges of both hunks intersect."""
    return max(first.new_start, second.new_start) <= min(first.new_end, second.new_end)


def _drift_offset(hunk: TrackedHunk, processed: Iterable[TrackedHunk]) -> int:
    # only other emails shift a hunk, and only from above its stated start
    return sum(
        previous.delta
        for previous in processed
        if previous.source_index != hunk.source_index and previous.original_new_start < hunk.new_start
    )


def merge_overlapping_hunks(earlier: TrackedHunk, later: TrackedHunk) -> TrackedHunk:
    """Fold ``later`` (already offset-adjusted) into ``earlier``.

    A later hunk covering the whole earlier range replaces it. Otherwise the
    earlier lines before the overlap, all later lines, and the earlier lines
    past the later hunk's end are concatenated in that order.
    """
    earlier_end = earlier.new_start + earlier.new_lines
    later_end = later.new_start + later.new_lines

    if later.new_start <= earlier.new_start and later_end >= earlier_end:
        return later.model_copy(deep=True)

    overlap_start = max(earlier.new_start, later.new_start)
    merged_lines: list[str] = []

    cursor = earlier.new_start
    for line in earlier.lines:
        if cursor < overlap_start:
            merged_lines.append(line)
        if not line.startswith("-"):
            cursor += 1

    merged_lines.extend(later.lines)

    cursor = earlier.new_start
    for line in earlier.lines:
        if not line.startswith("-"):
            cursor += 1
        if later_end < cursor <= earlier_end:
            merged_lines.append(line)

    new_start = min(earlier.new_start, later.new_start)
    return TrackedHunk(
        old_start=earlier.old_start,
        old_lines=earlier.old_lines + later.old_lines,
        new_start=new_start,
        new_lines=max(earlier_end, later_end) - new_start,
        lines=merged_lines,
        source_date=earlier.source_date,
        source_index=earlier.source_index,
        original_old_start=earlier.original_old_start,
        original_new_start=earlier.original_new_start,
    )


def merge_file_hunks(tracked_hunks: list[TrackedHunk]) -> list[Hunk]:
    """Merge every hunk contributed for one file into a consolidated, position-sorted set."""
    ordered = sorted(tracked_hunks, key=lambda hunk: (hunk.source_date, hunk.source_index, hunk.new_start))
    merged: list[TrackedHunk] = []
    processed: list[TrackedHunk] = []

    for hunk in ordered:
        offset = _drift_offset(hunk, processed)
        adjusted = hunk.model_copy(update={"new_start": hunk.new_start + offset})

        for index, existing in enumerate(merged):
            if hunks_overlap(existing, adjusted):
                merged[index] = merge_overlapping_hunks(existing, adjusted)
                break
        else:
            merged.append(adjusted)

        processed.append(hunk)

    merged.sort(key=lambda hunk: hunk.new_start)
    return [hunk.as_hunk() for hunk in merged]


def hunk_to_string(hunk: Hunk) -> str:
    header = f"@@ -{hunk.old_start},{hunk.old_lines} +{hunk.new_start},{hunk.new_lines} @@"
    return "\n".join([header, *hunk.lines])


def hunks_to_unified_diff(file_path: str, hunks: list[Hunk]) -> str:
    if not hunks:
        return ""
    lines = [
        f"diff --git a/{file_path} b/{file_path}",
        f"--- a/{file_path}",
        f"+++ b/{file_path}",
    ]
    lines.extend(hunk_to_string(hunk) for hunk in hunks)
    return "\n".join(lines)


def group_hunks_by_path(patches: Iterable[PatchInput]) -> dict[str, list[TrackedHunk]]:
    grouped: dict[str, list[TrackedHunk]] = {}
    for index, patch in enumerate(patches):
        for file_diff in parse_diff_content(patch.content):
            bucket = grouped.setdefault(file_diff.path, [])
            bucket.extend(
                TrackedHunk(
                    **hunk.model_dump(),
                    source_date=patch.date,
                    source_index=index,
                    original_old_start=hunk.old_start,
                    original_new_start=hunk.new_start,
                )
                for hunk in file_diff.hunks
            )
    return grouped


def merge_patches(patches: Iterable[PatchInput]) -> dict[str, MergedFile]:
    """Merge the diffs of chronologically ordered emails into one diff per file.

    Later emails take precedence inside overlapping regions. Paths without any
    surviving hunk are left out of the result.
    """
    result: dict[str, MergedFile] = {}
    for path, tracked in group_hunks_by_path(patches).items():
        hunks = merge_file_hunks(tracked)
        if not hunks:
            continue
        logger.debug("Merged %s hunks into %s for %s", len(tracked), len(hunks), path)
        result[path] = MergedFile(path=path, hunks=hunks, diff_string=hunks_to_unified_diff(path, hunks))
    return result
