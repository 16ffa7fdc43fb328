from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from fitsync.formatting import format_plan_line, format_space, parse_size
from fitsync.models import PlannedAction, SyncStats
from fitsync.planner import SyncOptions, sync_directories
from fitsync.run_service import (
    EXIT_INVALID_CONFIG,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    RunSummary,
    run_sync_jobs,
)


EXIT_USAGE_ERROR = EXIT_RUNTIME_ERROR


def _size_arg(value: str) -> int:
    try:
        return parse_size(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fitsync",
        description="One-way sync that keeps the newest files when the target runs out of space",
    )
    parser.add_argument("source", nargs="?", type=Path, help="Source directory")
    parser.add_argument("target", nargs="?", type=Path, help="Target directory")
    parser.add_argument("--config", type=Path, help="Run the jobs of a YAML/JSON config instead")
    parser.add_argument("--job", help="With --config, run only one job by name")
    parser.add_argument("--dry-run", action="store_true", help="Report the plan without touching the target")
    parser.add_argument(
        "--reserve",
        type=_size_arg,
        default=0,
        help="Space to leave free on the target, e.g. 500MB",
    )
    parser.add_argument(
        "--available",
        type=_size_arg,
        default=None,
        help="Treat this much space as free instead of measuring the target filesystem",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Gitignore-style pattern to leave out of the sync (repeatable)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log planning details")
    return parser


def _configure_logging(verbose: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    root = logging.getLogger("fitsync")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _print_action(planned: PlannedAction) -> None:
    print(format_plan_line(planned), flush=True)


def _print_stats(stats: SyncStats | RunSummary, dry_run: bool) -> None:
    prefix = "Dry run: " if dry_run else ""
    print(
        f"{prefix}created={stats.created} replaced={stats.replaced} deleted={stats.deleted} "
        f"skipped={stats.skipped} kept={stats.kept}"
    )


def cmd_sync(source: Path, target: Path, options: SyncOptions) -> int:
    try:
        result, stats = sync_directories(source, target, options, on_action=_print_action)
    except ValueError as exc:
        print(f"Invalid arguments: {exc}", file=sys.stderr)
        return EXIT_USAGE_ERROR
    except OSError as exc:
        print(f"Sync aborted: {exc}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    _print_stats(stats, options.dry_run)
    if not result.fits:
        print(
            f"Warning: still {format_space(result.total - result.available)} over the available space",
            file=sys.stderr,
        )
    return EXIT_SUCCESS


def cmd_config(config_path: Path, job_name: str | None, dry_run: bool) -> int:
    exit_code, summary = run_sync_jobs(
        config_path=config_path,
        job_name=job_name,
        dry_run=dry_run,
        on_action=_print_action,
    )
    if exit_code == EXIT_INVALID_CONFIG:
        print(f"Invalid config: {config_path}", file=sys.stderr)
        return exit_code
    if exit_code != EXIT_SUCCESS:
        print("Sync aborted, see log for details", file=sys.stderr)
        return exit_code

    _print_stats(summary, dry_run)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.config is not None:
        if args.source is not None or args.target is not None:
            print("Positional directories cannot be combined with --config", file=sys.stderr)
            return EXIT_USAGE_ERROR
        return cmd_config(args.config, args.job, args.dry_run)

    if args.source is None or args.target is None:
        print("Expected two arguments: SOURCE TARGET", file=sys.stderr)
        return EXIT_USAGE_ERROR
    if args.job:
        print("--job requires --config", file=sys.stderr)
        return EXIT_USAGE_ERROR

    for label, path in (("Source", args.source), ("Target", args.target)):
        if not path.is_dir():
            print(f"{label} is not a directory: {path}", file=sys.stderr)
            return EXIT_USAGE_ERROR

    options = SyncOptions(
        dry_run=args.dry_run,
        reserve=args.reserve,
        excludes=args.exclude,
        available=args.available,
    )
    return cmd_sync(args.source, args.target, options)


if __name__ == "__main__":
    raise SystemExit(main())
