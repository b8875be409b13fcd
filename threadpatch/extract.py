"""Locate diff content inside free-form email bodies."""

from __future__ import annotations

from collections.abc import Iterable

from threadpatch.models import PatchRegion, PatchRegionType

DIFF_HEADER_PREFIX = "diff --git "
_SIGNATURE_DELIMITERS = {"-- ", "--"}

DEFAULT_REGION_TYPES = (PatchRegionType.DIFF, PatchRegionType.BINARY_PATCH)


def extract_diff_blocks(body: str) -> list[str]:
    """Return every ``diff --git`` block of ``body`` in source order.

    A block runs from its header up to (not including) an email signature
    delimiter, the next header, or the end of the text. Anything outside a
    block is dropped.
    """
    blocks: list[str] = []
    current: list[str] = []
    in_diff = False

    for line in body.split("\n"):
        if line.startswith(DIFF_HEADER_PREFIX):
            if current:
                blocks.append("\n".join(current))
            current = [line]
            in_diff = True
            continue
        if not in_diff:
            continue
        if line in _SIGNATURE_DELIMITERS:
            if current:
                blocks.append("\n".join(current))
                current = []
            in_diff = False
            continue
        current.append(line)

    if current:
        blocks.append("\n".join(current))
    return blocks


def extract_region(body: str, region: PatchRegion) -> str:
    # start_line and end_line are 1-indexed and inclusive
    lines = body.split("\n")
    start = max(0, region.start_line - 1)
    end = min(len(lines), region.end_line)
    return "\n".join(lines[start:end])


def extract_diff_content(
    body: str,
    regions: Iterable[PatchRegion],
    region_types: Iterable[PatchRegionType | str] = DEFAULT_REGION_TYPES,
) -> list[str]:
    wanted = {PatchRegionType(kind) for kind in region_types}
    return [extract_region(body, region) for region in regions if region.type in wanted]
