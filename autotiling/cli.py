"""
Command-line interface for async-autotiling.

Usage:
    async-autotiling [--ratio RATIO] [--workspace NAMES] [--once] [-q] [--socket PATH]
    async-autotiling --version
"""

import argparse
from typing import List, Optional

from pydantic import ValidationError

from . import __version__
from .constants import Defaults
from .models import AutotilingConfig


def positive_float(value: str) -> float:
    """argparse type for --ratio: a float strictly greater than zero."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid float value: '{value}'")
    if not number > 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return number


def workspace_list(value: str) -> List[str]:
    """argparse type for --workspace: comma-separated workspace names.

    Surrounding whitespace is trimmed from each entry and empty entries are
    dropped; inner spaces are kept ("Web Browsing").
    """
    return [name.strip() for name in value.split(",") if name.strip()]


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="async-autotiling",
        description="Automatically switch between horizontal/vertical split layout for sway/i3.",
        epilog=(
            "Runs in the background, listens for window focus events and sets the "
            "split direction for the next window from the focused window's shape."
        ),
    )
    parser.add_argument(
        "--ratio",
        type=positive_float,
        default=Defaults.RATIO,
        metavar="RATIO",
        help=(
            "Aspect ratio threshold. The next split is vertical when "
            "window_height > window_width / RATIO (default: %(default)s; "
            "1.618 is a popular alternative)"
        ),
    )
    parser.add_argument(
        "--workspace",
        type=workspace_list,
        action="extend",
        default=[],
        metavar="NAMES",
        help='Only act on these workspaces (comma-separated, e.g. 1,dev,"Web Browsing")',
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run the logic once and exit",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress all log output",
    )
    parser.add_argument(
        "--socket",
        metavar="PATH",
        default=None,
        help="IPC socket path (default: $SWAYSOCK or $I3SOCK)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def parse_config(argv: Optional[List[str]] = None) -> AutotilingConfig:
    """Parse command-line arguments into an AutotilingConfig.

    Args:
        argv: Arguments without the program name (default: sys.argv[1:])

    Returns:
        Immutable daemon configuration

    Exits with status 2 on invalid arguments.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return AutotilingConfig(
            ratio_threshold=args.ratio,
            workspaces=frozenset(args.workspace),
            run_once=args.once,
            quiet=args.quiet,
            socket_path=args.socket,
        )
    except ValidationError as e:
        parser.error(str(e))
