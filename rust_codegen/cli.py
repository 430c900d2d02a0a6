"""
Command-line interface for crate generation.

Reads a JSON model document, generates the crate and writes it to an
output directory, then prints a per-module summary.
"""

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from . import __version__, generate_crate
from .core.config import ConfigError, get_config_manager
from .core.crate import CrateOutput
from .core.errors import GeneratorError
from .logging_config import get_logger, setup_logging
from .registry import get_registry

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Initialize rich console
console = Console()


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rust-codegen",
        description="Generate a Rust crate from a Smithy JSON model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  rust-codegen --model model.json --output out/
  rust-codegen --model model.json --config settings.json --dry-run
  rust-codegen --list-customizations
        """.strip(),
    )

    parser.add_argument("--model", "-m", metavar="FILE", help="JSON model document")
    parser.add_argument(
        "--output", "-o", metavar="DIR", help="Directory to write the crate into"
    )
    parser.add_argument("--config", metavar="FILE", help="JSON settings file")
    parser.add_argument("--module-name", metavar="NAME", help="Generated crate name")
    parser.add_argument(
        "--crate-prefix",
        metavar="PREFIX",
        help="Prefix of the runtime support crates (default: smithy)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Generate and report without writing files",
    )
    parser.add_argument(
        "--list-customizations",
        action="store_true",
        help="List registered customizations and exit",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: RUST_CODEGEN_LOG_LEVEL or INFO)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point of the ``rust-codegen`` command.

    Args:
        argv: Arguments without the program name, sys.argv if None

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    args = create_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        if args.list_customizations:
            return _list_customizations()

        if not args.model:
            raise CLIError("--model is required for generation")
        if not args.output and not args.dry_run:
            raise CLIError("--output is required unless --dry-run is given")

        document = _load_model(args.model)
        settings = _build_settings(args)
        output = generate_crate(document, settings)

        _print_summary(output)

        if not args.dry_run:
            for path in output.write_to(args.output):
                logger.debug(f"Wrote {path}")
            console.print(
                f"[green]✓[/green] Wrote {len(output.files)} files to {args.output}"
            )

        return 0 if output.success else 2

    except (CLIError, ConfigError, GeneratorError) as e:
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1


def _load_model(model_path: str) -> dict:
    path = Path(model_path)
    if not path.exists():
        raise CLIError(f"Model file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise CLIError(f"Invalid JSON in model file {path}: {e}") from e


def _build_settings(args: argparse.Namespace):
    """Merge the settings file with command-line overrides."""
    overrides = {}
    if args.module_name:
        overrides["module"] = args.module_name

    manager = get_config_manager()
    settings = manager.get_settings(overrides, args.config)

    if args.crate_prefix:
        runtime_config = replace(settings.runtime_config, crate_prefix=args.crate_prefix)
        settings = replace(settings, runtime_config=runtime_config)

    for warning in manager.validate_settings(settings):
        console.print(f"[yellow]⚠️ {warning}[/yellow]")

    return settings


def _list_customizations() -> int:
    table = Table(title="Registered Customizations", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Order", style="dim", justify="right")
    table.add_column("Name", style="bold green")

    for index, name in enumerate(get_registry().list_customizations(), start=1):
        table.add_row(str(index), name)

    console.print(table)
    return 0


def _print_summary(output: CrateOutput):
    table = Table(title="Generated Modules", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Module", style="bold green", no_wrap=True)
    table.add_column("Status")
    table.add_column("Dependencies", style="cyan")

    for module, result in output.results.items():
        if result.success:
            status = "[green]✓ ok[/green]"
            dependencies = ", ".join(result.metadata.get("dependencies", [])) or "-"
        else:
            status = "[red]✗ failed[/red]"
            dependencies = f"[red]{result.error_message}[/red]"
        table.add_row(module, status, dependencies)

    console.print(table)


if __name__ == "__main__":
    sys.exit(main())
