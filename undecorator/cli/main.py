"""
Command-line interface for undecorator

Rewrites MobX decorator usage in JavaScript and TypeScript sources into
decorator-free code.

Commands:
    apply        Rewrite files in place
    check        Report files that would change, exit 1 if any
    init-config  Write a default configuration file
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .. import __version__
from ..config import ConfigurationError, UndecorateConfig, load_config
from ..runner import FileStatus, RunReport, UndecorateRunner
from .rich_output import get_rich_output, set_rich_enabled

logger = logging.getLogger(__name__)

DIAGNOSTICS_LOGGER = "undecorator.codemod.diagnostics"


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Diagnostic lines carry their own prefix and location.
    diagnostics = logging.getLogger(DIAGNOSTICS_LOGGER)
    if not any(h.get_name() == DIAGNOSTICS_LOGGER for h in diagnostics.handlers):
        handler = logging.StreamHandler()
        handler.set_name(DIAGNOSTICS_LOGGER)
        handler.setFormatter(logging.Formatter("%(message)s"))
        diagnostics.addHandler(handler)
    diagnostics.propagate = False


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("paths", nargs="+", help="Files or directories to process")
    parser.add_argument(
        "--ignore-imports",
        action="store_true",
        help="Assume decorators come from mobx even when not imported directly",
    )
    parser.add_argument(
        "--workers", type=int, help="Number of files processed concurrently"
    )
    parser.add_argument(
        "--extensions",
        help="Comma separated file extensions to process (default: .js,.jsx,.ts,.tsx,...)",
    )
    parser.add_argument(
        "--print",
        dest="print_output",
        action="store_true",
        help="Print rewritten sources",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="undecorate",
        description="Migrate MobX decorators to decorator-free code",
        epilog='Use "undecorate <command> --help" for detailed command help.',
    )

    # Global options
    parser.add_argument("--config", "-c", type=str, help="Path to configuration file")

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output and debug logging",
    )

    parser.add_argument(
        "--no-rich",
        action="store_true",
        help="Disable rich terminal output (use plain text)",
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    apply_parser = subparsers.add_parser("apply", help="Rewrite files in place")
    _add_run_options(apply_parser)
    apply_parser.add_argument(
        "--dry-run", action="store_true", help="Show what would change without writing"
    )
    apply_parser.add_argument(
        "--no-backup", action="store_true", help="Do not create .backup copies"
    )

    check_parser = subparsers.add_parser(
        "check", help="Report files that would change (exit code 1 if any)"
    )
    _add_run_options(check_parser)

    init_parser = subparsers.add_parser("init-config", help="Write a default configuration file")
    init_parser.add_argument(
        "path", nargs="?", default="undecorate.yaml", help="Destination (default: undecorate.yaml)"
    )
    init_parser.add_argument(
        "--force", action="store_true", help="Overwrite an existing file"
    )

    return parser


def build_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate command line flags into a configuration override mapping."""
    transform: Dict[str, Any] = {}
    runner: Dict[str, Any] = {}
    if getattr(args, "ignore_imports", False):
        transform["ignore_imports"] = True
    if getattr(args, "workers", None) is not None:
        runner["max_workers"] = args.workers
    if getattr(args, "extensions", None):
        runner["extensions"] = [
            ext.strip() if ext.strip().startswith(".") else "." + ext.strip()
            for ext in args.extensions.split(",")
            if ext.strip()
        ]
    if getattr(args, "dry_run", False) or args.command == "check":
        runner["dry_run"] = True
    if getattr(args, "no_backup", False):
        runner["backup_enabled"] = False

    overrides: Dict[str, Any] = {}
    if transform:
        overrides["transform"] = transform
    if runner:
        overrides["runner"] = runner
    return overrides


def print_report(report: RunReport, print_output: bool = False) -> None:
    output = get_rich_output()
    title = "Dry run" if report.dry_run else "Results"
    output.print_header("undecorate", f"{title}: {len(report.files)} files processed")
    table = output.create_table(title, ["File", "Status", "Diagnostics"])
    for outcome in report.files:
        if outcome.status == FileStatus.UNCHANGED and not outcome.diagnostics:
            continue
        status = outcome.status.value
        if outcome.error:
            status = f"{status}: {outcome.error}"
        output.add_table_row(table, str(outcome.path), status, len(outcome.diagnostics))
    output.print_table(table)

    if print_output:
        for outcome in report.files:
            if outcome.output is not None:
                output.print_code(outcome.output, title=str(outcome.path))

    summary = (
        f"{report.modified} modified, {report.unchanged} unchanged, "
        f"{report.failed} failed, {report.diagnostics} diagnostics"
    )
    if report.failed:
        output.print_error(summary)
    elif report.diagnostics:
        output.print_warning(summary)
    else:
        output.print_success(summary)


def _run(args: argparse.Namespace) -> Optional[RunReport]:
    output = get_rich_output()
    try:
        config = load_config(args.config, overrides=build_overrides(args))
    except ConfigurationError as e:
        output.print_error(f"Configuration error: {e}")
        return None
    report = UndecorateRunner(config).run(args.paths)
    if not report.files:
        output.print_info("No matching files found")
    print_report(report, print_output=args.print_output)
    return report


def cmd_apply(args: argparse.Namespace) -> int:
    """Handle apply command."""
    report = _run(args)
    if report is None or report.failed:
        return 1
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Handle check command."""
    report = _run(args)
    if report is None or report.failed or report.modified:
        return 1
    return 0


def cmd_init_config(args: argparse.Namespace) -> int:
    """Handle init-config command."""
    output = get_rich_output()
    path = Path(args.path)
    if path.exists() and not args.force:
        output.print_error(f"{path} already exists, use --force to overwrite")
        return 1
    file_format = "yaml" if path.suffix in (".yaml", ".yml") else "json"
    try:
        UndecorateConfig.default().to_file(str(path), file_format)
    except ConfigurationError as e:
        output.print_error(str(e))
        return 1
    output.print_success(f"Default configuration file created at {path}")
    return 0


COMMANDS = {
    "apply": cmd_apply,
    "check": cmd_check,
    "init-config": cmd_init_config,
}


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    setup_logging(getattr(args, "verbose", False))
    set_rich_enabled(not getattr(args, "no_rich", False))

    exit_code = COMMANDS[args.command](args)
    if exit_code:
        sys.exit(exit_code)
