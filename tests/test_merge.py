from datetime import UTC, datetime

from threadpatch.merge import (
    hunk_to_string,
    hunks_overlap,
    hunks_to_unified_diff,
    merge_file_hunks,
    merge_overlapping_hunks,
    merge_patches,
)
from threadpatch.models import Hunk, PatchInput, TrackedHunk
from threadpatch.parser import parse_diff_block

T1 = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)
T2 = datetime(2024, 3, 2, 9, 0, tzinfo=UTC)
T3 = datetime(2024, 3, 3, 9, 0, tzinfo=UTC)


def _diff(path: str, *hunk_lines: str) -> str:
    return "\n".join([f"diff --git a/{path} b/{path}", f"--- a/{path}", f"+++ b/{path}", *hunk_lines])


def _tracked(
    new_start: int,
    new_lines: int,
    lines: list[str],
    date: datetime,
    old_start: int = 1,
    old_lines: int = 1,
    index: int = 0,
) -> TrackedHunk:
    return TrackedHunk(
        old_start=old_start,
        old_lines=old_lines,
        new_start=new_start,
        new_lines=new_lines,
        lines=lines,
        source_date=date,
        source_index=index,
        original_old_start=old_start,
        original_new_start=new_start,
    )


def test_single_patch_with_disjoint_hunks_is_unchanged() -> None:
    content = _diff(
        "src/app.py",
        "@@ -1,3 +1,4 @@",
        " import os",
        "+import sys",
        " import re",
        " import json",
        "@@ -20,3 +21,4 @@ def main():",
        "     a = 1",
        "+    b = 2",
        "     c = 3",
        "     return a",
    )
    original = parse_diff_block(content)[0].hunks

    merged = merge_patches([PatchInput(content=content, date=T1)])

    assert list(merged) == ["src/app.py"]
    assert merged["src/app.py"].hunks == original


def test_later_patch_is_shifted_by_earlier_net_additions() -> None:
    first = _diff("x.c", "@@ -10,1 +10,3 @@", " anchor", "+added one", "+added two")
    second = _diff("x.c", "@@ -10,3 +12,3 @@", " line a", "-line b", "+line B", " line c")

    merged = merge_patches([PatchInput(content=first, date=T1), PatchInput(content=second, date=T2)])

    hunks = merged["x.c"].hunks
    assert [hunk.new_start for hunk in hunks] == [10, 14]
    assert hunks[1].old_start == 10
    assert hunks[1].lines == [" line a", "-line b", "+line B", " line c"]


def test_patches_sharing_a_timestamp_still_shift_each_other() -> None:
    first = _diff("x.c", "@@ -10,1 +10,3 @@", " anchor", "+added one", "+added two")
    second = _diff("x.c", "@@ -10,3 +12,3 @@", " line a", "-line b", "+line B", " line c")

    merged = merge_patches([PatchInput(content=first, date=T1), PatchInput(content=second, date=T1)])

    hunks = merged["x.c"].hunks
    assert [hunk.new_start for hunk in hunks] == [10, 14]
    assert hunks[1].lines == [" line a", "-line b", "+line B", " line c"]


def test_hunks_of_one_patch_never_shift_each_other() -> None:
    first = _tracked(1, 3, [" a", "+b", " c"], T1, old_lines=2)
    second = _tracked(20, 3, [" x", "+y", " z"], T1, old_start=19, old_lines=2)

    merged = merge_file_hunks([first, second])

    assert [hunk.new_start for hunk in merged] == [1, 20]


def test_later_restatement_of_same_region_wins_verbatim() -> None:
    first = _diff("x.c", "@@ -1,2 +1,3 @@", " a", "+b", " c")
    second = _diff("x.c", "@@ -1,3 +1,3 @@", " a", "-b", "+B", " c")

    merged = merge_patches([PatchInput(content=first, date=T1), PatchInput(content=second, date=T2)])

    hunks = merged["x.c"].hunks
    assert len(hunks) == 1
    assert hunks[0].lines == [" a", "-b", "+B", " c"]
    assert (hunks[0].new_start, hunks[0].new_lines) == (1, 3)


def test_input_order_does_not_matter_only_dates() -> None:
    first = _diff("x.c", "@@ -1,2 +1,3 @@", " a", "+b", " c")
    second = _diff("x.c", "@@ -1,3 +1,3 @@", " a", "-b", "+B", " c")

    merged = merge_patches([PatchInput(content=second, date=T2), PatchInput(content=first, date=T1)])

    assert merged["x.c"].hunks[0].lines == [" a", "-b", "+B", " c"]


def test_partial_overlap_keeps_earlier_prefix_then_later_lines() -> None:
    earlier = _tracked(1, 4, [" l1", " l2", "-l3", "+L3", " l4"], T1, old_start=1, old_lines=4)
    later = _tracked(3, 4, [" l3x", "-l4", "+L4", " l5", " l6"], T2, old_start=3, old_lines=4, index=1)

    merged = merge_overlapping_hunks(earlier, later)

    assert merged.lines == [" l1", " l2", " l3x", "-l4", "+L4", " l5", " l6"]
    assert merged.new_start == 1
    assert merged.new_lines == 6
    assert merged.old_start == 1
    assert merged.old_lines == 8
    assert merged.source_date == T1
    assert merged.source_index == 0
    assert merged.original_new_start == 1


def test_partial_overlap_keeps_earlier_suffix_after_later_end() -> None:
    earlier = _tracked(1, 5, [" a", " b", " c", " d", " e"], T1, old_lines=5)
    later = _tracked(2, 2, ["-b", "+B", " c"], T2, old_start=2, old_lines=2, index=1)

    merged = merge_overlapping_hunks(earlier, later)

    assert merged.lines == [" a", "-b", "+B", " c", " d", " e"]
    assert (merged.new_start, merged.new_lines) == (1, 5)


def test_full_cover_replaces_with_later_provenance() -> None:
    earlier = _tracked(5, 2, [" x", "+y"], T1, old_start=5)
    later = _tracked(4, 5, [" w", " x", "-y", "+Y", " z", " q"], T2, old_start=4, old_lines=5, index=1)

    merged = merge_overlapping_hunks(earlier, later)

    assert merged.lines == later.lines
    assert merged.new_start == 4
    assert merged.source_date == T2


def test_overlap_uses_inclusive_ranges() -> None:
    a = Hunk(old_start=1, old_lines=3, new_start=1, new_lines=3)
    touching = Hunk(old_start=3, old_lines=2, new_start=3, new_lines=2)
    apart = Hunk(old_start=4, old_lines=2, new_start=4, new_lines=2)

    assert hunks_overlap(a, touching)
    assert not hunks_overlap(a, apart)


def test_merge_file_hunks_sorts_output_by_position() -> None:
    low = _tracked(2, 1, ["+late low"], T2, old_lines=0, index=1)
    high = _tracked(40, 1, ["+early high"], T1, old_lines=0)

    merged = merge_file_hunks([high, low])

    assert [hunk.new_start for hunk in merged] == [2, 40]
    assert all(type(hunk) is Hunk for hunk in merged)


def test_round_trip_through_parser_preserves_counts() -> None:
    first = _diff("x.c", "@@ -10,1 +10,3 @@", " anchor", "+added one", "+added two")
    second = _diff("x.c", "@@ -10,3 +12,3 @@", " line a", "-line b", "+line B", " line c")
    merged = merge_patches([PatchInput(content=first, date=T1), PatchInput(content=second, date=T2)])["x.c"]

    reparsed = parse_diff_block(merged.diff_string)

    assert len(reparsed) == 1
    assert reparsed[0].path == "x.c"
    assert [(h.old_lines, h.new_lines) for h in reparsed[0].hunks] == [(h.old_lines, h.new_lines) for h in merged.hunks]


def test_serialization_layout() -> None:
    hunk = Hunk(old_start=3, old_lines=1, new_start=3, new_lines=1, lines=["-a", "+b"])

    assert hunk_to_string(hunk) == "@@ -3,1 +3,1 @@\n-a\n+b"
    assert hunks_to_unified_diff("lib/a.c", [hunk]) == (
        "diff --git a/lib/a.c b/lib/a.c\n--- a/lib/a.c\n+++ b/lib/a.c\n@@ -3,1 +3,1 @@\n-a\n+b"
    )
    assert hunks_to_unified_diff("lib/a.c", []) == ""


def test_garbage_patches_are_ignored() -> None:
    good = _diff("x.c", "@@ -1,2 +1,3 @@", " a", "+b", " c")
    truncated = _diff("y.c", "@@ -1,5 +1,5 @@", "-only one line")

    merged = merge_patches(
        [
            PatchInput(content=good, date=T1),
            PatchInput(content=truncated, date=T2),
            PatchInput(content="no diff here, just a reply", date=T3),
        ]
    )

    assert list(merged) == ["x.c"]


def test_empty_input_yields_empty_map() -> None:
    assert merge_patches([]) == {}


def test_naive_dates_compare_with_aware_dates() -> None:
    first = _diff("x.c", "@@ -1,2 +1,3 @@", " a", "+b", " c")
    second = _diff("x.c", "@@ -1,3 +1,3 @@", " a", "-b", "+B", " c")

    merged = merge_patches(
        [
            PatchInput(content=first, date=datetime(2024, 3, 1, 9, 0)),
            PatchInput(content=second, date=T2),
        ]
    )

    assert merged["x.c"].hunks[0].lines == [" a", "-b", "+B", " c"]
