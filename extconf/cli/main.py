"""extconf entry point.

Maps shell verbs to extension manager operations: scan, list, show, private.
"""

import argparse
import sys
from typing import List, Optional

from extconf.cli.output import die
from extconf.cli.verbs import list_extensions, private, scan, show


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="extconf",
        description="Resolve and cache extension configuration",
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="YAML settings file (default: ./extconf.yaml if present)",
    )
    parser.add_argument(
        "--extension-path", "-e",
        default=None,
        help="Extension root directory",
    )
    parser.add_argument(
        "--cache-path",
        default=None,
        help="Cache document location",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    sub = parser.add_subparsers(dest="verb", required=True)

    scan.register(sub)
    list_extensions.register(sub)
    show.register(sub)
    private.register(sub)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    from extconf.config import Settings, load_settings
    from extconf.errors import ExtensionError
    from extconf.logger import setup_logging

    try:
        settings = load_settings(args.config)
    except ExtensionError as e:
        die(e.message)

    updates = {}
    if args.extension_path:
        updates["extension_path"] = args.extension_path
    if args.cache_path:
        updates["cache_path"] = args.cache_path
    if args.debug:
        updates["log_level"] = "DEBUG"
    if updates:
        settings = Settings(**{**settings.model_dump(), **updates})

    setup_logging(settings.log_level, settings.log_dir)

    handler = args.handler
    try:
        handler(args, settings)
    except ExtensionError as e:
        die(e.message)
    except OSError as e:
        die(f"cannot read extension root: {e}")


if __name__ == "__main__":
    main(sys.argv[1:])
