"""Shared helpers for CLI command modules."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import yaml

from threadpatch.config import ThreadPatchConfig, load_effective_config
from threadpatch.models import PatchInput, ThreadMessage
from threadpatch.pipeline import ThreadDiffEngine

ALIAS_TO_CANONICAL = {
    "aggregate": "merge",
    "split": "sections",
    "serve-api": "serve",
}


def normalize_command(name: str) -> str:
    return ALIAS_TO_CANONICAL.get(name, name)


def _load_json_array(path: Path, what: str) -> list:
    raw = json.loads(path.read_text())
    if not isinstance(raw, list):
        raise ValueError(f"Input must be a JSON array of {what}")
    return raw


def load_json_messages(path: Path) -> list[ThreadMessage]:
    return [ThreadMessage.model_validate(item) for item in _load_json_array(path, "messages")]


def load_json_patches(path: Path) -> list[PatchInput]:
    return [PatchInput.model_validate(item) for item in _load_json_array(path, "patches")]


def read_text_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text()


def load_yaml_dict(path: str | None) -> dict | None:
    if not path:
        return None
    data = yaml.safe_load(Path(path).read_text())
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError(f"YAML at {path} must decode to a mapping")
    return data


def load_config(args: argparse.Namespace) -> ThreadPatchConfig:
    return load_effective_config(
        project_path=args.project_path,
        org_defaults=load_yaml_dict(args.org_config),
        system_defaults=load_yaml_dict(args.system_config),
        runtime_override=load_yaml_dict(args.runtime_override),
    )


def build_engine(config: ThreadPatchConfig) -> ThreadDiffEngine:
    return ThreadDiffEngine(config=config)


def add_common_config_flags(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--project-path", default=".", help="Directory holding an optional .threadpatch.yaml")
    cmd.add_argument("--org-config", help="Optional org defaults YAML")
    cmd.add_argument("--system-config", help="Optional system defaults YAML")
    cmd.add_argument("--runtime-override", help="Optional runtime override YAML")
