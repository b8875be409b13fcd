"""Thread-level aggregation of patch regions into merged per-file diffs."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from pathlib import Path

from threadpatch.config import AggregateConfig, ThreadPatchConfig, load_effective_config
from threadpatch.extract import extract_diff_content
from threadpatch.hooks import HookManager, HookName
from threadpatch.merge import merge_patches
from threadpatch.models import AggregateReport, PatchInput, ThreadMessage

logger = logging.getLogger(__name__)


def extract_patches_from_messages(
    messages: Iterable[ThreadMessage],
    config: AggregateConfig | None = None,
) -> list[PatchInput]:
    """Collect the diff-bearing regions of every message, oldest message first."""
    config = config or AggregateConfig()
    patches: list[PatchInput] = []

    for message in sorted(messages, key=lambda item: item.date):
        metadata = message.patch_metadata
        if not message.body or metadata is None or not metadata.has_patch or not metadata.regions:
            continue
        for content in extract_diff_content(message.body, metadata.regions, config.region_types):
            if content.strip():
                patches.append(PatchInput(content=content, date=message.date))

    return patches


def apply_size_cap(patches: list[PatchInput], config: AggregateConfig) -> tuple[list[PatchInput], int]:
    """Keep patches in order while the running char/line totals fit the caps."""
    kept: list[PatchInput] = []
    total_chars = 0
    total_lines = 0

    for index, patch in enumerate(patches):
        total_chars += len(patch.content)
        total_lines += patch.content.count("\n") + 1
        over_chars = config.max_total_chars is not None and total_chars > config.max_total_chars
        over_lines = config.max_total_lines is not None and total_lines > config.max_total_lines
        if over_chars or over_lines:
            skipped = len(patches) - index
            logger.warning(
                "Diff size cap reached after %s patches (chars=%s lines=%s); skipping %s",
                len(kept),
                total_chars,
                total_lines,
                skipped,
            )
            return kept, skipped
        kept.append(patch)

    return kept, 0


class ThreadDiffEngine:
    def __init__(self, config: ThreadPatchConfig, hooks: HookManager | None = None) -> None:
        self.config = config
        self.hooks = hooks or HookManager()

    @classmethod
    def from_project(
        cls,
        project_path: str | Path,
        org_defaults: dict | None = None,
        system_defaults: dict | None = None,
        runtime_override: dict | None = None,
        hooks: HookManager | None = None,
    ) -> ThreadDiffEngine:
        config = load_effective_config(
            project_path=project_path,
            org_defaults=org_defaults,
            system_defaults=system_defaults,
            runtime_override=runtime_override,
        )
        return cls(config=config, hooks=hooks)

    def aggregate_messages(self, messages: list[ThreadMessage]) -> AggregateReport:
        start = time.perf_counter()
        context = {"message_count": len(messages)}
        self.hooks.emit(HookName.BEFORE_EXTRACT, context, {})

        patches = extract_patches_from_messages(messages, self.config.aggregate)
        extract_elapsed = time.perf_counter() - start

        self.hooks.emit(HookName.AFTER_EXTRACT, context, {"patch_count": len(patches)})
        logger.info("Extracted %s patch regions from %s messages", len(patches), len(messages))

        report = self._merge(patches, context)
        report.message_count = len(messages)
        report.profile["extract_seconds"] = round(extract_elapsed, 6)
        return report

    def aggregate_patches(self, patches: list[PatchInput]) -> AggregateReport:
        return self._merge(patches, {"message_count": 0})

    def _merge(self, patches: list[PatchInput], context: dict) -> AggregateReport:
        start = time.perf_counter()
        kept, skipped = apply_size_cap(patches, self.config.aggregate)
        self.hooks.emit(HookName.BEFORE_MERGE, context, {"patch_count": len(kept), "skipped_patches": skipped})

        merged = merge_patches(kept)
        files = sorted(merged.values(), key=lambda item: item.path)
        elapsed = time.perf_counter() - start

        self.hooks.emit(HookName.AFTER_MERGE, context, {"file_count": len(files)})
        logger.info(
            "Merge complete: patches=%s skipped=%s files=%s elapsed=%.3fs",
            len(kept),
            skipped,
            len(files),
            elapsed,
        )
        if not files:
            logger.debug("No diff content survived merging")

        return AggregateReport(
            patch_count=len(kept),
            skipped_patches=skipped,
            files=files,
            profile={
                "merge_seconds": round(elapsed, 6),
                "hunk_count": sum(len(item.hunks) for item in files),
            },
        )
