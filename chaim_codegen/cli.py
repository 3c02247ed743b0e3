"""Command-line entry point of chaim-codegen."""

from __future__ import annotations

import logging
import sys
from typing import Sequence

from .codegen.cli_integration import CLIError, build_parser, handle_codegen_command
from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)

__all__ = ["CLIError", "main"]


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, configure logging and run the requested command.

    Args:
        argv: Argument list without the program name (defaults to ``sys.argv[1:]``).

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        # --help exits with 0, usage errors with 2
        return 0 if e.code in (0, None) else 1

    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    setup_logging(level)

    logger.debug("Arguments: %s", vars(args))
    return handle_codegen_command(args)


if __name__ == "__main__":
    sys.exit(main())
