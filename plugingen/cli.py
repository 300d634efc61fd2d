"""Plugin code generator CLI tool.

Usage:
    plugingen generate plugins/
    plugingen check plugins/economy.py
    plugingen info plugins/
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables FIRST (before importing project constants)
load_dotenv(".env")

from rich.console import Console
from rich.table import Table

from plugingen import constants
from plugingen.generator import Generator, ModuleReport

logger = logging.getLogger(__name__)

console = Console(highlight=False, soft_wrap=True)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def get_generator(args) -> Generator:
    """Create a Generator from command line options."""
    out_dir = getattr(args, "out_dir", None)
    return Generator(
        runtime_module=args.runtime_module,
        suffix=args.suffix,
        source_root=Path(args.source_root) if args.source_root else None,
        out_dir=Path(out_dir) if out_dir else None,
    )


def run_paths(args, dry_run: bool) -> Optional[List[ModuleReport]]:
    generator = get_generator(args)
    reports = []
    for raw in args.paths:
        try:
            reports.extend(generator.generate_path(Path(raw), dry_run=dry_run))
        except FileNotFoundError as e:
            console.print(str(e), style="red", markup=False)
            return None
    return reports


def print_diagnostics(reports: List[ModuleReport]) -> int:
    """Print every diagnostic; return how many there were."""
    count = 0
    for report in reports:
        for diagnostic in report.diagnostics:
            console.print(diagnostic.format(), style="red", markup=False)
            count += 1
    return count


def cmd_generate(args) -> int:
    """Generate implementation modules."""
    reports = run_paths(args, dry_run=args.dry_run)
    if reports is None:
        return 1

    errors = print_diagnostics(reports)
    for report in reports:
        if report.removed is not None:
            console.print(f"Removed stale {report.removed}", style="yellow", markup=False)
        if report.output_path is None:
            continue
        action = "Would write" if args.dry_run else "Wrote"
        names = ", ".join(o.name for o in report.generated)
        console.print(f"{action} {report.output_path} ({names})", style="green", markup=False)

    generated = sum(len(r.generated) for r in reports)
    failed = sum(len(r.failed) for r in reports)
    console.print(f"{generated} declaration(s) generated, {failed} failed.", markup=False)
    return 1 if errors else 0


def cmd_check(args) -> int:
    """Validate annotations without writing anything."""
    reports = run_paths(args, dry_run=True)
    if reports is None:
        return 1

    errors = print_diagnostics(reports)
    if errors:
        console.print(f"Found {errors} issue(s).", style="red", markup=False)
        return 1

    declarations = sum(len(r.outcomes) for r in reports)
    console.print(
        f"All checks passed. {declarations} declaration(s) in {len(reports)} module(s).",
        style="green",
        markup=False,
    )
    return 0


def cmd_info(args) -> int:
    """Show the descriptor and subscriptions of each annotated declaration."""
    reports = run_paths(args, dry_run=True)
    if reports is None:
        return 1

    outcomes = [(r, o) for r in reports for o in r.outcomes]
    if not outcomes:
        console.print("No annotated declarations found.", markup=False)
        return 0

    table = Table(title="Annotated declarations")
    table.add_column("Declaration", style="cyan")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Version")
    table.add_column("API")
    table.add_column("Subscriptions")
    table.add_column("State")

    for report, outcome in outcomes:
        descriptor = outcome.records.get("descriptor")
        events = outcome.records.get("subscriptions")
        table.add_row(
            f"{report.module_name}.{outcome.name}",
            descriptor.id if descriptor else "-",
            descriptor.name if descriptor else "-",
            descriptor.version if descriptor else "-",
            descriptor.api_version if descriptor else "-",
            ", ".join(events) if events is not None else "-",
            outcome.state.value,
        )
    console.print(table)

    errors = print_diagnostics(reports)
    return 1 if errors else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plugingen",
        description="Generate Plugin / PluginSubscriptions implementations from annotated classes",
    )
    parser.add_argument(
        "--log-level",
        default=constants.LOG_LEVEL,
        help="Logging level (default: $LOG_LEVEL or WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("paths", nargs="+", help="Source files or directories")
    common.add_argument(
        "--source-root",
        default=None,
        help="Directory module names are computed against (default: each file's directory)",
    )
    common.add_argument(
        "--suffix",
        default=constants.GENERATED_SUFFIX,
        help="Generated module suffix (default: $PLUGINGEN_SUFFIX or _gen)",
    )
    common.add_argument(
        "--runtime-module",
        default=constants.RUNTIME_MODULE,
        help="Module generated code imports the interfaces from",
    )

    # generate
    generate_parser = subparsers.add_parser("generate", parents=[common], help="Generate modules")
    generate_parser.add_argument("--out-dir", default=None, help="Write generated modules here")
    generate_parser.add_argument(
        "--dry-run", action="store_true", help="Report what would be written without writing"
    )

    # check
    subparsers.add_parser("check", parents=[common], help="Validate annotations only")

    # info
    subparsers.add_parser("info", parents=[common], help="Show parsed annotations")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(args.log_level)
    logger.debug(f"Running '{args.command}' on {args.paths}")

    commands = {
        "generate": cmd_generate,
        "check": cmd_check,
        "info": cmd_info,
    }
    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
