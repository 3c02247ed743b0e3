"""
CLI integration for code generation functionality.

Defines the argparse arguments of the ``chaim-codegen`` command and
renders generation results with rich.
"""

import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import (
    GenerationResult,
    GeneratorConfig,
    generate_code,
    get_config_manager,
    get_generator,
    get_language_info,
    is_language_supported,
    list_all_language_info,
    list_supported_languages,
    load_config,
    resolve_language,
)
from ..logging_config import get_logger
from ..utils import load_schemas, load_table_metadata

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


console = Console()


def add_codegen_args(parser: argparse.ArgumentParser) -> None:
    """Add code generation arguments to a parser."""
    input_group = parser.add_argument_group("schema input")
    sources = input_group.add_mutually_exclusive_group()
    sources.add_argument(
        "--schemas",
        metavar="JSON",
        help="Inline schema document or JSON array of schema documents",
    )
    sources.add_argument(
        "--schemas-file",
        metavar="PATH",
        help="File holding a schema document or an array of them",
    )
    sources.add_argument(
        "--schemas-url",
        metavar="URL",
        help="URL to fetch schema JSON from",
    )
    input_group.add_argument(
        "--table-metadata",
        metavar="JSON|PATH",
        help="Table metadata as inline JSON, a file path, or a URL",
    )

    gen_group = parser.add_argument_group("code generation")
    gen_group.add_argument(
        "--package",
        metavar="NAME",
        help="Base package of the generated sources",
    )
    gen_group.add_argument(
        "--output",
        "-o",
        metavar="DIR",
        help="Root directory of the generated source tree",
    )
    gen_group.add_argument(
        "--language",
        "-l",
        default="java",
        help="Target language (default: java)",
    )
    gen_group.add_argument(
        "--config", metavar="FILE", help="JSON configuration file for code generation"
    )
    gen_group.add_argument(
        "--strict-subtypes",
        action="store_true",
        help="Fail on unknown dotted type subtypes instead of warning",
    )
    gen_group.add_argument(
        "--no-repositories",
        action="store_true",
        help="Don't generate repositories even when table metadata is given",
    )
    gen_group.add_argument(
        "--no-comments",
        action="store_true",
        help="Don't generate Javadoc comments",
    )

    output_group = parser.add_argument_group("output")
    verbosity = output_group.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Log progress")
    verbosity.add_argument("--debug", action="store_true", help="Log debug details")

    info_group = parser.add_argument_group("information")
    info_group.add_argument(
        "--list-languages",
        action="store_true",
        help="List supported target languages and exit",
    )
    info_group.add_argument(
        "--language-info",
        metavar="LANGUAGE",
        help="Show detailed information about a language and exit",
    )


def handle_codegen_command(args: argparse.Namespace) -> int:
    """
    Handle code generation command from CLI arguments.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        if getattr(args, "list_languages", False):
            return _list_languages()

        if getattr(args, "language_info", None):
            return _show_language_info(args.language_info)

        if not _validate_language(args.language):
            return 1

        language = resolve_language(args.language)
        config = _build_config(args, language)
        schemas = _load_schemas(args)
        table_metadata = load_table_metadata(args.table_metadata)
        output_dir = _output_dir(args, config)

        return _generate_and_report(schemas, table_metadata, language, config, output_dir)

    except CLIError as e:
        logger.debug("CLI error: %s", e)
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1


def _list_languages() -> int:
    """List supported languages with details."""
    language_info = list_all_language_info()

    if not language_info:
        console.print("[yellow]⚠️ No code generators available[/yellow]")
        return 0

    table = Table(title="📋 Supported Languages", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Language", style="bold green", no_wrap=True)
    table.add_column("Extension", style="cyan")
    table.add_column("Generator Class", style="dim")
    table.add_column("Aliases", style="blue")

    for lang_name, info in sorted(language_info.items()):
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(lang_name, info["file_extension"], info["class"], aliases)

    console.print()
    console.print(table)
    console.print()
    console.print(
        Panel(
            "[bold]Usage:[/bold] chaim-codegen --schemas-file [dim]orders.bprint[/dim] "
            "--package [cyan]com.acme.orders[/cyan] --output [dim]src/main/java[/dim]\n"
            "[bold]Info:[/bold] chaim-codegen --language-info [cyan]LANGUAGE[/cyan]",
            title="💡 Quick Start",
            border_style="blue",
        )
    )
    return 0


def _show_language_info(language: str) -> int:
    """Show detailed information about a specific language."""
    if not _validate_language(language, silent=True):
        console.print(f"[red]✗ Error:[/red] Language '{language}' is not supported")
        console.print("[dim]Use --list-languages to see available options[/dim]")
        return 1

    info = get_language_info(language)

    info_text = (
        f"[bold]Language:[/bold] {info['name']}\n"
        f"[bold]File Extension:[/bold] {info['file_extension']}\n"
        f"[bold]Generator Class:[/bold] {info['class']}\n"
        f"[bold]Module:[/bold] {info['module']}"
    )
    if info["aliases"]:
        info_text += f"\n[bold]Aliases:[/bold] {', '.join(info['aliases'])}"

    console.print()
    console.print(
        Panel(info_text, title=f"🔧 {info['name'].title()} Generator", border_style="green")
    )

    config = load_config(info["name"])
    config_table = Table(
        title="⚙️  Default Configuration",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    config_table.add_column("Setting", style="bold")
    config_table.add_column("Value", style="green")
    config_table.add_row("Package Name", str(config.package_name))
    config_table.add_row("Indent Size", str(config.indent_size))
    config_table.add_row("Add Comments", str(config.add_comments))
    config_table.add_row("Strict Subtypes", str(config.strict_subtypes))
    config_table.add_row("Generate Repositories", str(config.generate_repositories))
    config_table.add_row("Batch Max Attempts", str(config.batch_max_attempts))

    console.print()
    console.print(config_table)
    return 0


def _validate_language(language: str, silent: bool = False) -> bool:
    """Validate that a language is supported."""
    if is_language_supported(language):
        return True
    if not silent:
        supported = list_supported_languages()
        console.print(f"[red]✗ Error:[/red] Unsupported language '{language}'")
        console.print(f"[dim]Supported languages: {', '.join(supported)}[/dim]")
    return False


def _load_schemas(args: argparse.Namespace):
    if not (args.schemas or args.schemas_file or args.schemas_url):
        raise CLIError("One of --schemas, --schemas-file or --schemas-url is required")
    return load_schemas(
        text=args.schemas,
        file_path=args.schemas_file,
        url=args.schemas_url,
    )


def _build_config(args: argparse.Namespace, language: str) -> GeneratorConfig:
    """Merge defaults, the config file and command line overrides."""
    overrides: Dict[str, Any] = {}

    if args.package:
        overrides["package_name"] = args.package
    if args.output:
        overrides["output_dir"] = args.output
    if args.strict_subtypes:
        overrides["strict_subtypes"] = True
    if args.no_repositories:
        overrides["generate_repositories"] = False
    if args.no_comments:
        overrides["add_comments"] = False

    config = load_config(language, custom_config=overrides, config_file=args.config)
    for warning in get_config_manager().validate_config(config, language):
        logger.warning("Configuration: %s", warning)
    return config


def _output_dir(args: argparse.Namespace, config: GeneratorConfig) -> Path:
    output = args.output or config.output_dir
    if not output:
        raise CLIError("--output is required (or set output_dir in the config file)")
    return Path(output)


def _generate_and_report(
    schemas, table_metadata, language: str, config: GeneratorConfig, output_dir: Path
) -> int:
    """Run the generator behind a spinner and print the outcome."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(
            f"[green]Generating {language} sources for {len(schemas)} schema(s)...",
            total=None,
        )
        generator = get_generator(language, config)
        result = generate_code(generator, schemas, output_dir, table_metadata)

    if not result.success:
        console.print(f"[red]✗ Error:[/red] {result.error_message}")
        if result.files:
            console.print(
                f"[dim]{len(result.files)} file(s) were written before the failure[/dim]"
            )
        return 1

    _print_summary(result, output_dir)
    _print_warnings(result.warnings)
    return 0


def _print_summary(result: GenerationResult, output_dir: Path) -> None:
    table = Table(
        title="📦 Generated Files",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Role", style="bold")
    table.add_column("Count", justify="right")
    table.add_column("Files", style="green")

    for role, files in result.files_by_role().items():
        table.add_row(role, str(len(files)), "\n".join(_relative(f.path, output_dir) for f in files))

    console.print()
    console.print(table)
    console.print(
        f"[green]✓[/green] Wrote {len(result.files)} file(s) to [cyan]{output_dir}[/cyan]"
    )


def _print_warnings(warnings: List[str]) -> None:
    if not warnings:
        return
    console.print("\n[yellow]⚠️  Warnings:[/yellow]")
    for warning in warnings:
        console.print(f"  [yellow]•[/yellow] {warning}")
    console.print()


def _relative(path: Path, root: Path) -> str:
    try:
        return str(Path(path).relative_to(root))
    except ValueError:
        return str(path)


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog or "chaim-codegen",
        description="Generate a DynamoDB Enhanced Client data-access layer from .bprint schemas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  chaim-codegen --schemas-file user.bprint --package com.acme.users --output src/main/java
  chaim-codegen --schemas-file schemas.json --table-metadata table.json --package com.acme --output out
  chaim-codegen --list-languages
  chaim-codegen --language-info java
        """.strip(),
    )
    add_codegen_args(parser)
    return parser
