"""Command-line front door for ghr.

Parses CLI options, merges them over saved preferences, and resolves the
repository and pull request through ``gh``. Then dispatches into the
interactive runtime, or renders a single frame when not attached to a TTY.
"""

from __future__ import annotations

import argparse
import logging
import sys

from .config import load_preferences
from .github import (
    INFERENCE_EXPLICIT,
    GitHubCliError,
    infer_pr_for_current_branch,
    list_open_prs,
    load_pr_comments,
    resolve_repo,
)
from .render.theme import available_theme_names, resolve_theme
from .runtime import run_app
from .runtime.app import AppOptions

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _positive_float(value: str) -> float:
    """argparse type for positive second counts."""
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghr",
        description="Browse pull-request discussion and inline review comments in the terminal.",
    )
    parser.add_argument("--repo", metavar="OWNER/NAME", help="Repository to open (default: current directory).")
    parser.add_argument("--pr", type=_positive_int, help="Pull request number (default: PR for current branch).")
    parser.add_argument(
        "--refresh-seconds",
        type=_positive_float,
        default=None,
        help="Auto refresh interval for the comment viewer.",
    )
    parser.add_argument("--no-mouse", action="store_true", help="Start with mouse capture off.")
    parser.add_argument(
        "--no-color",
        action="store_true",
        help=f"Disable color output (themes: {', '.join(available_theme_names())}).",
    )
    parser.add_argument("--log-file", metavar="PATH", help="Write debug logs to PATH.")
    return parser


def configure_logging(log_file: str | None) -> None:
    """Send logs to ``log_file``; the terminal itself is owned by the UI."""
    if not log_file:
        return
    logging.basicConfig(filename=log_file, level=logging.DEBUG, format=LOG_FORMAT)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and launch the selector or the comment viewer.

    The viewer opens directly when ``--pr`` is given or when the checked-out
    branch has an open PR; otherwise the PR selector is shown first.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file)

    preferences = load_preferences()
    interactive = sys.stdin.isatty() and sys.stdout.isatty()
    theme = resolve_theme(preferences.theme, no_color=args.no_color or not sys.stdout.isatty())

    try:
        repo = resolve_repo(args.repo)
        prs = list_open_prs(repo)
        data = None
        if args.pr is not None:
            data = load_pr_comments(repo, args.pr, INFERENCE_EXPLICIT)
        else:
            pr, inference = infer_pr_for_current_branch(repo)
            logger.info("PR inference: %s", inference)
            if pr is not None:
                data = load_pr_comments(repo, pr.number, inference)
    except GitHubCliError as exc:
        logger.error("startup failed: %s", exc)
        raise SystemExit(f"ghr: {exc}") from exc

    options = AppOptions(
        repo=repo,
        theme=theme,
        refresh_seconds=args.refresh_seconds or preferences.auto_refresh_seconds,
        mouse_capture=preferences.mouse_capture and not args.no_mouse,
        interactive=interactive,
    )
    run_app(options, prs=prs, data=data)


if __name__ == "__main__":
    main()
