"""Per-file splitting and line classification of diff text for rendering."""

from __future__ import annotations

import logging
import re

from threadpatch.config import HighlightConfig
from threadpatch.models import (
    DiffLineEntry,
    DiffLineKind,
    HighlightRequest,
    NumberedDiffLine,
    ParsedDiffFile,
    ThemeMode,
)
from threadpatch.parser import parse_hunk_header

DIFF_GIT_HEADER_RE = re.compile(r"^diff --git a/(.+) b/(.+)$")
logger = logging.getLogger(__name__)

_META_PREFIXES = (
    "diff --git ",
    "index ",
    "--- ",
    "+++ ",
    "old mode ",
    "new mode ",
    "new file mode ",
    "deleted file mode ",
    "similarity index ",
    "rename from ",
    "rename to ",
)

_HIGHLIGHTABLE = {DiffLineKind.ADD, DiffLineKind.DEL, DiffLineKind.CTX}

_EXACT_FILENAMES = {"makefile": "make"}

_SUFFIX_LANGUAGES = (
    (".mk", "make"),
    (".c", "c"),
    (".h", "c"),
    (".cc", "cpp"),
    (".cpp", "cpp"),
    (".cxx", "cpp"),
    (".hh", "cpp"),
    (".hpp", "cpp"),
    (".hxx", "cpp"),
    (".rs", "rust"),
    (".go", "go"),
    (".py", "python"),
    (".ts", "typescript"),
    (".tsx", "tsx"),
    (".js", "javascript"),
    (".mjs", "javascript"),
    (".cjs", "javascript"),
    (".jsx", "jsx"),
    (".json", "json"),
    (".toml", "toml"),
    (".yaml", "yaml"),
    (".yml", "yaml"),
    (".md", "markdown"),
    (".html", "html"),
    (".htm", "html"),
    (".css", "css"),
    (".scss", "scss"),
    (".less", "less"),
    (".xml", "xml"),
    (".sql", "sql"),
    (".sh", "bash"),
    (".bash", "bash"),
    (".zsh", "bash"),
    (".ps1", "powershell"),
)


def _normalize(diff_text: str) -> str:
    return diff_text.replace("\r\n", "\n").rstrip()


def classify_line_kind(line: str) -> DiffLineKind:
    if line.startswith("@@ "):
        return DiffLineKind.HUNK_HEADER
    if line.startswith("+") and not line.startswith("+++ "):
        return DiffLineKind.ADD
    if line.startswith("-") and not line.startswith("--- "):
        return DiffLineKind.DEL
    if line.startswith(" "):
        return DiffLineKind.CTX
    if line.startswith(_META_PREFIXES):
        return DiffLineKind.META
    return DiffLineKind.NOTE


def to_line_entries(lines: list[str]) -> tuple[list[DiffLineEntry], list[str]]:
    entries: list[DiffLineEntry] = []
    highlightable: list[str] = []

    for line in lines:
        kind = classify_line_kind(line)
        if kind in _HIGHLIGHTABLE:
            content = line[1:]
            entries.append(
                DiffLineEntry(
                    kind=kind,
                    text=line,
                    prefix=line[0],
                    content=content,
                    highlight_index=len(highlightable),
                )
            )
            highlightable.append(content)
            continue
        entries.append(DiffLineEntry(kind=kind, text=line, prefix="", content=line, highlight_index=None))

    return entries, highlightable


def _to_parsed_file(
    section_lines: list[str],
    section_index: int,
    old_path: str | None,
    new_path: str | None,
) -> ParsedDiffFile:
    display_path = new_path or old_path or f"section-{section_index + 1}.diff"
    entries, highlightable = to_line_entries(section_lines)
    return ParsedDiffFile(
        file_id=f"{display_path}:{section_index}",
        old_path=old_path,
        new_path=new_path,
        display_path=display_path,
        raw_section_text="\n".join(section_lines),
        line_entries=entries,
        highlightable_lines=highlightable,
    )


def parse_unified_diff_by_file(diff_text: str) -> list[ParsedDiffFile]:
    """Split diff text into one classified section per ``diff --git`` header.

    Text without any header becomes a single fallback section.
    """
    normalized = _normalize(diff_text)
    if not normalized:
        return []

    lines = normalized.split("\n")
    starts = [index for index, line in enumerate(lines) if DIFF_GIT_HEADER_RE.match(line)]
    if not starts:
        return [_to_parsed_file(lines, 0, None, None)]

    sections: list[ParsedDiffFile] = []
    for position, start in enumerate(starts):
        end = starts[position + 1] if position + 1 < len(starts) else len(lines)
        section_lines = lines[start:end]
        header = DIFF_GIT_HEADER_RE.match(section_lines[0])
        old_path = header.group(1) if header else None
        new_path = header.group(2) if header else None
        sections.append(_to_parsed_file(section_lines, position, old_path, new_path))
    return sections


def number_diff_lines(diff_text: str) -> list[NumberedDiffLine]:
    """Attach old/new file line numbers to every line inside a hunk."""
    rows: list[NumberedDiffLine] = []
    normalized = _normalize(diff_text)
    if not normalized:
        return rows

    old_line: int | None = None
    new_line: int | None = None
    for line in normalized.split("\n"):
        kind = classify_line_kind(line)
        if kind == DiffLineKind.HUNK_HEADER:
            header = parse_hunk_header(line)
            old_line, new_line = (header[0], header[2]) if header else (None, None)
            rows.append(NumberedDiffLine(kind=kind, text=line))
            continue
        if line.startswith("diff --git "):
            old_line = new_line = None
        if old_line is None or new_line is None:
            rows.append(NumberedDiffLine(kind=kind, text=line))
            continue

        if kind == DiffLineKind.ADD:
            rows.append(NumberedDiffLine(kind=kind, text=line, new_line=new_line))
            new_line += 1
        elif kind == DiffLineKind.DEL:
            rows.append(NumberedDiffLine(kind=kind, text=line, old_line=old_line))
            old_line += 1
        elif kind == DiffLineKind.CTX or line == "":
            rows.append(NumberedDiffLine(kind=DiffLineKind.CTX, text=line, old_line=old_line, new_line=new_line))
            old_line += 1
            new_line += 1
        else:
            rows.append(NumberedDiffLine(kind=kind, text=line))
    return rows


def infer_language(path: str) -> str:
    trimmed = path.strip()
    if not trimmed:
        return "text"
    filename = trimmed.lower().split("/")[-1]
    if filename in _EXACT_FILENAMES:
        return _EXACT_FILENAMES[filename]
    for suffix, language in _SUFFIX_LANGUAGES:
        if filename.endswith(suffix):
            return language
    return "text"


def exceeds_highlight_limits(lines: list[str], limits: HighlightConfig) -> bool:
    if len(lines) > limits.max_lines:
        return True
    return sum(len(line) for line in lines) > limits.max_total_chars


def build_highlight_request(
    parsed_file: ParsedDiffFile,
    theme: ThemeMode | str = ThemeMode.LIGHT,
    limits: HighlightConfig | None = None,
) -> HighlightRequest:
    limits = limits or HighlightConfig()
    if exceeds_highlight_limits(parsed_file.highlightable_lines, limits):
        raise ValueError(
            f"{parsed_file.display_path} exceeds highlight limits "
            f"(max_lines={limits.max_lines}, max_total_chars={limits.max_total_chars})"
        )
    return HighlightRequest(
        file_id=parsed_file.file_id,
        lines=list(parsed_file.highlightable_lines),
        language_hint=infer_language(parsed_file.display_path),
        theme=ThemeMode(theme),
    )


def build_highlight_requests(
    files: list[ParsedDiffFile],
    theme: ThemeMode | str | None = None,
    limits: HighlightConfig | None = None,
) -> list[HighlightRequest]:
    """Highlight requests for every section that fits the limits.

    Without an explicit theme the configured ``default_theme`` is used.
    """
    limits = limits or HighlightConfig()
    theme = theme or limits.default_theme
    requests: list[HighlightRequest] = []
    for parsed_file in files:
        if not parsed_file.highlightable_lines:
            continue
        if exceeds_highlight_limits(parsed_file.highlightable_lines, limits):
            logger.warning("Skipping highlight for %s: section too large", parsed_file.display_path)
            continue
        requests.append(build_highlight_request(parsed_file, theme, limits))
    return requests
