"""Report generation for merged thread diffs."""

from __future__ import annotations

import json
from pathlib import Path

from threadpatch.models import AggregateReport


def render_merged_diff(report: AggregateReport) -> str:
    chunks = [item.diff_string for item in report.files if item.diff_string]
    if not chunks:
        return ""
    return "\n".join(chunks) + "\n"


def render_markdown_report(report: AggregateReport) -> str:
    lines = [
        "# Merged Patch Report",
        "",
        f"Generated: {report.generated_at.isoformat()}",
        "",
        f"- Messages: {report.message_count}",
        f"- Patches merged: {report.patch_count}",
        f"- Patches skipped (size cap): {report.skipped_patches}",
        f"- Files changed: {len(report.files)}",
        "",
    ]

    if not report.files:
        lines.append("_No patches found in this thread._")
        return "\n".join(lines)

    lines.append("| File | Hunks | + | - |")
    lines.append("|---|---:|---:|---:|")
    for item in report.files:
        lines.append(f"| `{item.path}` | {len(item.hunks)} | {item.additions} | {item.deletions} |")
    return "\n".join(lines)


def write_report_bundle(report: AggregateReport, output_dir: str | Path) -> None:
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    (out / "merged.diff").write_text(render_merged_diff(report))
    (out / "merged_files.json").write_text(report.model_dump_json(indent=2))
    (out / "merge_report.md").write_text(render_markdown_report(report))
    (out / "merge_profile.json").write_text(json.dumps(report.profile, indent=2))
