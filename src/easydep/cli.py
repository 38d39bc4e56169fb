"""Command-line interface for easydep."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from easydep import __version__
from easydep.errors import EasyDepError
from easydep.pipeline import run

logger = logging.getLogger("easydep")

# `cargo easy-dep ...` invokes `cargo-easy-dep easy-dep ...`.
_CARGO_SUBCOMMAND = "easy-dep"

_TRUTHY = {"1", "true", "yes", "on"}


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cargo easy-dep",
        description=(
            "Move dependencies shared by several workspace members into "
            "[workspace.dependencies] and point members at them."
        ),
    )
    parser.add_argument(
        "-m",
        "--min-occurrences",
        type=_positive_int,
        default=None,
        help=(
            "Minimum number of occurrences to consider a dependency common "
            "(default: 2, env: CARGO_EASY_DEP_MIN_OCCURRENCES)"
        ),
    )
    parser.add_argument(
        "-w",
        "--workspace-root",
        type=Path,
        default=None,
        help=(
            "Path to workspace root (default: current directory, "
            "env: CARGO_EASY_DEP_WORKSPACE_ROOT)"
        ),
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress all output (env: CARGO_EASY_DEP_QUIET)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )
    parser.add_argument(
        "-k",
        "--keep-going",
        action="store_true",
        help="Continue with remaining members after a member fails",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=_positive_int,
        default=1,
        help="Rewrite member manifests in parallel with this many threads",
    )
    parser.add_argument("--version", action="version", version=__version__)
    return parser


def _resolve_min_occurrences(
    parser: argparse.ArgumentParser, flag: int | None
) -> int | None:
    if flag is not None:
        return flag
    raw = os.environ.get("CARGO_EASY_DEP_MIN_OCCURRENCES")
    if not raw:
        return None
    try:
        return _positive_int(raw)
    except argparse.ArgumentTypeError as e:
        parser.error(f"CARGO_EASY_DEP_MIN_OCCURRENCES: {e}")


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    if argv and argv[0] == _CARGO_SUBCOMMAND:
        argv = argv[1:]

    parser = _build_parser()
    args = parser.parse_args(argv)

    quiet = args.quiet or _env_flag("CARGO_EASY_DEP_QUIET")
    workspace_root = args.workspace_root
    if workspace_root is None and os.environ.get("CARGO_EASY_DEP_WORKSPACE_ROOT"):
        workspace_root = Path(os.environ["CARGO_EASY_DEP_WORKSPACE_ROOT"])
    min_occurrences = _resolve_min_occurrences(parser, args.min_occurrences)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if quiet:
        logger.setLevel(logging.CRITICAL + 1)
    elif args.verbose:
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    try:
        report = run(
            workspace_root,
            min_occurrences=min_occurrences,
            keep_going=args.keep_going,
            jobs=args.jobs,
        )
    except EasyDepError as e:
        logger.error("Error: %s", e)
        return 1

    if not report.ok:
        logger.error(
            "Failed to update %d member Cargo.toml files:", len(report.failures)
        )
        for path, error in report.failures:
            logger.error("  - %s: %s", path, error)
        return 1

    if report.common:
        logger.info(
            "Successfully updated all Cargo.toml files with workspace dependencies."
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
