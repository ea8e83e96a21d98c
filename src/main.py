# src/main.py — v2
"""CLI entry point — build, clean, gc, outputs, plan commands.

Usage:
    assetpipe [-f ASSETFILE] build
    assetpipe [-f ASSETFILE] clean
    assetpipe [-f ASSETFILE] gc
    assetpipe [-f ASSETFILE] outputs
    assetpipe [-f ASSETFILE] plan
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from assetpipe.version import __version__

if TYPE_CHECKING:
    from assetpipe.config.settings import Settings
    from assetpipe.project.project import Project

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        from assetpipe.config.settings import load_settings

        settings = load_settings()
        _setup_logging(settings, args.verbose)
        return args.func(args, settings)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="assetpipe",
        description=f"assetpipe v{__version__} — incremental file pipeline builder",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "-f", "--assetfile", type=Path, default=None,
        help="Path to the Assetfile (default: ASSETPIPE_ASSETFILE or ./Assetfile)",
    )
    parser.add_argument(
        "--digest-addition", action="append", default=[], metavar="TOKEN",
        help="Extra token for the temp directory fingerprint (repeatable)",
    )

    subparsers = parser.add_subparsers(dest="command")

    p_build = subparsers.add_parser("build", help="Build stale outputs")
    p_build.add_argument(
        "--force", action="store_true",
        help="Clean all generated state before building",
    )
    p_build.set_defaults(func=_cmd_build)

    p_clean = subparsers.add_parser(
        "clean", help="Remove temp directories and output files",
    )
    p_clean.set_defaults(func=_cmd_clean)

    p_gc = subparsers.add_parser(
        "gc", help="Remove temp directories of earlier configurations",
    )
    p_gc.set_defaults(func=_cmd_gc)

    p_outputs = subparsers.add_parser("outputs", help="List declared output files")
    p_outputs.set_defaults(func=_cmd_outputs)

    p_plan = subparsers.add_parser("plan", help="Show the static execution plan")
    p_plan.set_defaults(func=_cmd_plan)

    return parser


def _create_project(args: argparse.Namespace, settings: Settings) -> Project:
    """Create a Project from CLI args and settings."""
    from assetpipe.config.digest import DigestAdditions, default_digest_additions
    from assetpipe.project.project import Project

    assetfile: Path = args.assetfile or settings.assetfile
    additions = DigestAdditions(
        [
            *default_digest_additions().tokens,
            *settings.digest_additions_list,
            *args.digest_addition,
        ]
    )
    return Project(
        assetfile,
        digest_additions=additions,
        tmpdir_prefix=settings.tmpdir_prefix,
        manifest_backend=settings.manifest_backend,
    )


def _cmd_build(args: argparse.Namespace, settings: Settings) -> int:
    """Build every stale output."""
    project = _create_project(args, settings)
    if args.force:
        project.clean()
    result = project.invoke_clean()

    print("\nBuild complete:")
    print(f"  Built:        {len(result.executed)}")
    print(f"  Up to date:   {len(result.skipped)}")
    print(f"  Duration:     {result.duration_ms}ms")
    return 0


def _cmd_clean(args: argparse.Namespace, settings: Settings) -> int:
    """Remove all generated state."""
    project = _create_project(args, settings)
    result = project.clean()
    for path in result.removed:
        print(f"removed  {path}")
    for path in result.failed:
        print(f"FAILED   {path}")
    return 0 if result.success else 1


def _cmd_gc(args: argparse.Namespace, settings: Settings) -> int:
    """Remove obsolete temp directories."""
    project = _create_project(args, settings)
    # Loading the project already collected; retry anything that failed then.
    removed = list(project.last_cleanup.removed)
    result = project.cleanup_tmpdir()
    removed.extend(result.removed)
    for path in removed:
        print(f"removed  {path}")
    for path in result.failed:
        print(f"FAILED   {path}")
    print(f"Current temp directory: {project.digested_tmpdir}")
    return 0 if result.success else 1


def _cmd_outputs(args: argparse.Namespace, settings: Settings) -> int:
    """Print declared output files."""
    project = _create_project(args, settings)
    for path in project.output_files:
        print(path)
    return 0


def _cmd_plan(args: argparse.Namespace, settings: Settings) -> int:
    """Print static execution stages."""
    project = _create_project(args, settings)
    plan = project.pipeline.execution_plan()
    for idx, stage in enumerate(plan.stages, start=1):
        print(f"Stage {idx}:")
        for name in stage:
            print(f"  {name}")
    return 0


def _setup_logging(settings: Settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from assetpipe.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        max_bytes=int(settings.log_rotation),
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
