"""HTTP API exposing thread merging and diff section parsing."""

from __future__ import annotations

import os
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from threadpatch.config import ThreadPatchConfig, load_effective_config
from threadpatch.models import PatchInput, ThemeMode, ThreadMessage
from threadpatch.pipeline import ThreadDiffEngine
from threadpatch.sections import (
    build_highlight_request,
    exceeds_highlight_limits,
    number_diff_lines,
    parse_unified_diff_by_file,
)


class MergeRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    messages: list[ThreadMessage] = Field(default_factory=list)
    patches: list[PatchInput] = Field(default_factory=list)


class DiffTextRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    diff: str
    theme: ThemeMode | None = None
    highlight: bool = False


def create_app(config: ThreadPatchConfig) -> FastAPI:
    app = FastAPI(title="threadpatch API")
    engine = ThreadDiffEngine(config=config)

    @app.get("/api/health", response_class=JSONResponse)
    def api_health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    @app.post("/api/threads/merge", response_class=JSONResponse)
    def api_merge(payload: MergeRequest) -> JSONResponse:
        if payload.messages and payload.patches:
            raise HTTPException(status_code=400, detail="Send either messages or patches, not both")
        count = len(payload.messages) or len(payload.patches)
        if count > config.server.max_request_patches:
            raise HTTPException(
                status_code=400,
                detail=f"Too many items: {count} > {config.server.max_request_patches}",
            )

        if payload.messages:
            report = engine.aggregate_messages(payload.messages)
        else:
            report = engine.aggregate_patches(payload.patches)
        return JSONResponse(report.model_dump(mode="json"))

    @app.post("/api/diff/sections", response_class=JSONResponse)
    def api_sections(payload: DiffTextRequest) -> JSONResponse:
        files = parse_unified_diff_by_file(payload.diff)
        body: dict[str, Any] = {"files": [item.model_dump(mode="json") for item in files]}
        if payload.theme is None and not payload.highlight:
            return JSONResponse(body)
        theme = payload.theme or config.highlight.default_theme

        requests: list[dict[str, Any]] = []
        for item in files:
            if not item.highlightable_lines:
                continue
            if exceeds_highlight_limits(item.highlightable_lines, config.highlight):
                raise HTTPException(
                    status_code=400,
                    detail=f"{item.display_path} exceeds highlight limits "
                    f"({config.highlight.max_lines} lines / {config.highlight.max_total_chars} chars)",
                )
            request = build_highlight_request(item, theme, config.highlight)
            requests.append({**request.model_dump(mode="json"), "cache_key": list(request.cache_key)})
        body["highlight_requests"] = requests
        return JSONResponse(body)

    @app.post("/api/diff/line-numbers", response_class=JSONResponse)
    def api_line_numbers(payload: DiffTextRequest) -> JSONResponse:
        rows = number_diff_lines(payload.diff)
        return JSONResponse({"lines": [row.model_dump(mode="json") for row in rows]})

    return app


def create_app_from_env() -> FastAPI:
    """Uvicorn factory entrypoint for --reload mode."""
    project_path = os.environ.get("THREADPATCH_PROJECT_PATH", ".")
    config = load_effective_config(project_path=project_path)
    return create_app(config)
