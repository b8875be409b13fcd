"""Serve API command."""

from __future__ import annotations

import argparse
import logging
import os

from threadpatch.commands.common import load_config

logger = logging.getLogger(__name__)


def run(args: argparse.Namespace) -> int:
    config = load_config(args)
    host = args.host or config.server.host
    port = args.port or config.server.port

    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - dependency/runtime
        raise RuntimeError("Missing optional API dependencies. Install with: pip install 'threadpatch[ui]'") from exc

    logger.info("Starting API on http://%s:%s", host, port)
    if args.reload:
        os.environ["THREADPATCH_PROJECT_PATH"] = str(args.project_path)
        uvicorn.run(
            "threadpatch.webapp:create_app_from_env",
            host=host,
            port=port,
            reload=True,
            factory=True,
            log_level=args.log_level.lower(),
        )
    else:
        from threadpatch.webapp import create_app

        app = create_app(config)
        uvicorn.run(app, host=host, port=port, reload=False, log_level=args.log_level.lower())
    return 0
