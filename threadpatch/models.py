"""Core Pydantic domain models for threadpatch."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class DiffLineKind(str, Enum):
    META = "meta"
    HUNK_HEADER = "hunkHeader"
    ADD = "add"
    DEL = "del"
    CTX = "ctx"
    NOTE = "note"


class PatchRegionType(str, Enum):
    DIFF = "diff"
    DIFF_STAT = "diff_stat"
    BINARY_PATCH = "binary_patch"


class ThemeMode(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class PatchInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: str
    date: datetime

    @field_validator("date")
    @classmethod
    def _normalize_date(cls, value: datetime) -> datetime:
        return _as_utc(value)


class Hunk(BaseModel):
    model_config = ConfigDict(extra="forbid")

    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: list[str] = Field(default_factory=list)

    @property
    def delta(self) -> int:
        return self.new_lines - self.old_lines

    @property
    def new_end(self) -> int:
        """Last new-file line covered by the hunk (inclusive)."""
        return self.new_start + self.new_lines - 1


class TrackedHunk(Hunk):
    source_date: datetime
    source_index: int
    original_old_start: int
    original_new_start: int

    def as_hunk(self) -> Hunk:
        return Hunk(
            old_start=self.old_start,
            old_lines=self.old_lines,
            new_start=self.new_start,
            new_lines=self.new_lines,
            lines=list(self.lines),
        )


class FileDiff(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str
    hunks: list[Hunk] = Field(default_factory=list)


class MergedFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str
    hunks: list[Hunk] = Field(default_factory=list)
    diff_string: str = ""

    @property
    def additions(self) -> int:
        return sum(1 for hunk in self.hunks for line in hunk.lines if line.startswith("+"))

    @property
    def deletions(self) -> int:
        return sum(1 for hunk in self.hunks for line in hunk.lines if line.startswith("-"))


class DiffLineEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: DiffLineKind
    text: str
    prefix: str = ""
    content: str = ""
    highlight_index: int | None = None


class ParsedDiffFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file_id: str
    old_path: str | None = None
    new_path: str | None = None
    display_path: str
    raw_section_text: str
    line_entries: list[DiffLineEntry] = Field(default_factory=list)
    highlightable_lines: list[str] = Field(default_factory=list)


class NumberedDiffLine(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: DiffLineKind
    text: str
    old_line: int | None = None
    new_line: int | None = None


class HighlightRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file_id: str
    lines: list[str] = Field(default_factory=list)
    language_hint: str = "text"
    theme: ThemeMode = ThemeMode.LIGHT

    @property
    def cache_key(self) -> tuple[str, str]:
        return (self.file_id, self.theme.value)


class PatchRegion(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start_line: int = Field(ge=1)
    end_line: int = Field(ge=0)
    type: PatchRegionType


class PatchMetadata(BaseModel):
    model_config = ConfigDict(extra="forbid")

    has_patch: bool = False
    has_diffstat: bool = False
    files: list[str] = Field(default_factory=list)
    regions: list[PatchRegion] = Field(default_factory=list)


class ThreadMessage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message_id: str
    date: datetime
    subject: str = ""
    author: str | None = None
    body: str | None = None
    patch_metadata: PatchMetadata | None = None

    @field_validator("date")
    @classmethod
    def _normalize_date(cls, value: datetime) -> datetime:
        return _as_utc(value)


class AggregateReport(BaseModel):
    model_config = ConfigDict(extra="forbid")

    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    message_count: int = 0
    patch_count: int
    skipped_patches: int = 0
    files: list[MergedFile] = Field(default_factory=list)
    profile: dict[str, Any] = Field(default_factory=dict)
