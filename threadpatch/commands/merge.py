"""Thread merge command."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from threadpatch.commands.common import build_engine, load_config, load_json_messages, load_json_patches
from threadpatch.reporting import write_report_bundle

logger = logging.getLogger(__name__)


def run(args: argparse.Namespace) -> int:
    config = load_config(args)
    engine = build_engine(config)
    if args.patches:
        report = engine.aggregate_patches(load_json_patches(Path(args.input)))
    else:
        report = engine.aggregate_messages(load_json_messages(Path(args.input)))

    write_report_bundle(report, args.output_dir)
    logger.info("Merge complete: files=%s output=%s", len(report.files), args.output_dir)
    return 0
