"""CLI entrypoint for threadpatch."""

from __future__ import annotations

from threadpatch.commands import merge, sections, serve
from threadpatch.commands.common import normalize_command
from threadpatch.commands.parser import build_parser
from threadpatch.logging_utils import configure_logging

COMMANDS = {
    "merge": merge.run,
    "sections": sections.run,
    "serve": serve.run,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, debug_modules=args.debug_module)
    args.command = normalize_command(args.command)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
