"""Command line entry point: ``python -m Blocktave workspace.json``."""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from typing import Optional, Sequence

from Blocktave import __version__, generate_file
from Blocktave.transpile.errors import GenerationError

_log = logging.getLogger("Blocktave")


def _configure_logging(verbosity: int) -> None:
    """Attach a stderr handler to the ``Blocktave`` logger.

    Parameters
    ----------
    verbosity:
        0 -> WARNING, 1 -> INFO, 2+ -> DEBUG.
    """

    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    _log.setLevel(level)
    _log.addHandler(handler)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blocktave",
        description="Generate a MATLAB/Octave script from a Blockly workspace.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("workspace", help="Blockly JSON workspace file.")
    parser.add_argument(
        "-o", "--output",
        default=None,
        metavar="FILE",
        help='Write the script to FILE instead of stdout ("-" for stdout).',
    )
    parser.add_argument(
        "--zero-based",
        action="store_true",
        help="Treat block positions as zero-based.",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        metavar="N",
        help="Spaces per indentation level (default: 2).",
    )
    parser.add_argument(
        "--functions-last",
        action="store_true",
        help="Place functions after the script body (MATLAB local functions).",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line tool and return its exit status."""

    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.indent < 0:
        parser.error("--indent must not be negative")

    try:
        code = generate_file(
            args.workspace,
            zero_based=args.zero_based or None,
            indent=" " * args.indent,
            functions_last=args.functions_last,
        )
    except OSError as exc:
        print(f"blocktave: cannot read {args.workspace}: {exc.strerror or exc}", file=sys.stderr)
        return 1
    except GenerationError as exc:
        print(f"blocktave: {exc}", file=sys.stderr)
        return 1

    if args.output in (None, "-"):
        sys.stdout.write(code)
    else:
        pathlib.Path(args.output).write_text(code, encoding="utf-8")
        _log.info("wrote %s", args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
