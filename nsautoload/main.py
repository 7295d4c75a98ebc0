"""nsautoload CLI - inspect namespace mappings and trace resolution."""

import logging
import os
import sys
from pathlib import Path

import click
from rich.markup import escape
from rich.table import Table

from .console import console
from .console import error_console
from .errors import SettingsError
from .logging_setup import init_json_logging
from .resolver import AutoloaderConfig
from .resolver import NamespaceResolver
from .settings import load_config

logger = logging.getLogger(__name__)


def _parse_mapping(value: str) -> tuple[str, str]:
    """Parse a PREFIX=DIR option value."""
    prefix, sep, directory = value.partition("=")
    if not sep or not prefix.strip() or not directory.strip():
        raise click.UsageError(f"Invalid --map value '{value}' (expected PREFIX=DIR)")
    return prefix.strip(), directory.strip()


def _build_resolver(config: AutoloaderConfig) -> NamespaceResolver:
    """Create a resolver holding config's mappings without registering it.

    The CLI only registers with the import system when it actually loads a
    file (``resolve --load``).
    """
    resolver = NamespaceResolver(
        AutoloaderConfig(
            fail_fast_on_registration_error=config.fail_fast_on_registration_error,
            extension=config.extension,
        )
    )
    if config.has_single_pair:
        resolver.add_namespace(config.namespace, config.directory)
    for prefix, directory in config.initial_mappings:
        resolver.add_namespace(prefix, directory)
    return resolver


def _candidate_status(path: str, is_winner: bool, loadable: bool) -> str:
    if is_winner:
        return "[green]selected[/green]"
    if loadable:
        return "[dim]shadowed[/dim]"
    if os.path.isdir(path):
        return "[yellow]directory[/yellow]"
    if os.path.isfile(path):
        return "[red]unreadable[/red]"
    return "[dim]missing[/dim]"


@click.group(invoke_without_command=True)
@click.option(
    "--config",
    "config_files",
    multiple=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="Extra settings file, merged after the standard scopes (repeatable)",
)
@click.option("--map", "mappings", multiple=True, metavar="PREFIX=DIR", help="Add a mapping (repeatable)")
@click.option("--verbose", "-v", is_flag=True, help="Log resolution details")
@click.option("--log-file", type=click.Path(path_type=Path, dir_okay=False), help="Write JSONL logs to this file")
@click.pass_context
def cli(ctx: click.Context, config_files, mappings, verbose: bool, log_file: Path | None):
    """Map namespace prefixes to directories and resolve module names through them.

    Examples:

        \b
        # Show mappings from .nsautoload/settings.yaml plus one extra
        nsautoload --map Acme.Billing=src/billing show

        \b
        # Which file would Acme.Billing.Invoice load?
        nsautoload resolve Acme.Billing.Invoice
    """
    level = "DEBUG" if verbose else None
    if log_file is not None or os.environ.get("NSAUTOLOAD_LOG_PATH"):
        init_json_logging(log_file, level)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    extra = [_parse_mapping(value) for value in mappings]
    try:
        config = load_config(config_files=config_files, extra_mappings=extra)
    except SettingsError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        ctx.exit(2)

    ctx.obj = {"config": config}

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


@cli.command()
@click.pass_obj
def show(obj: dict):
    """Show registered prefixes and their directories in search order."""
    resolver = _build_resolver(obj["config"])
    namespaces = resolver.namespaces

    if not namespaces:
        console.print("[yellow]No namespaces configured.[/yellow]")
        console.print("Add some to .nsautoload/settings.yaml or pass --map PREFIX=DIR.")
        return

    table = Table(title="Namespaces", show_header=True, header_style="bold cyan")
    table.add_column("Prefix", style="green")
    table.add_column("#", justify="right")
    table.add_column("Directory")
    table.add_column("Exists", justify="center")

    for prefix in sorted(namespaces, key=lambda p: (-p.count("."), p)):
        for index, directory in enumerate(namespaces[prefix], 1):
            exists = "[green]yes[/green]" if os.path.isdir(directory) else "[red]no[/red]"
            table.add_row(escape(prefix) if index == 1 else "", str(index), escape(directory), exists)

    console.print(table)
    console.print(f"\nExtension: {obj['config'].extension}")


@cli.command()
@click.argument("identifier")
@click.option("--load", is_flag=True, help="Load the selected file instead of only locating it")
@click.pass_obj
def resolve(obj: dict, identifier: str, load: bool):
    """Show every candidate file for IDENTIFIER and which one wins.

    Exits with status 1 when no candidate can be loaded.
    """
    resolver = _build_resolver(obj["config"])

    if load:
        resolver.register_handler(fail_fast=False)
        try:
            winner = resolver.resolve_identifier(identifier)
        except Exception as e:
            error_console.print(f"[red]Error loading {escape(identifier)}:[/red] {escape(f'{type(e).__name__}: {e}')}")
            sys.exit(1)
    else:
        winner = resolver.locate(identifier)

    candidates = list(resolver.iter_candidates(identifier))
    if candidates:
        table = Table(title=f"Candidates for {escape(identifier)}", show_header=True, header_style="bold cyan")
        table.add_column("#", justify="right")
        table.add_column("Prefix", style="green")
        table.add_column("Path")
        table.add_column("Status")

        selected = False
        for index, (prefix, path) in enumerate(candidates, 1):
            is_winner = not selected and path == winner
            status = _candidate_status(path, is_winner, resolver.loader.is_loadable(path))
            table.add_row(str(index), escape(prefix), escape(path), status)
            selected = selected or is_winner
        console.print(table)
    else:
        console.print(f"[dim]No registered prefix matches {escape(identifier)}[/dim]")

    if winner is None:
        console.print(f"[yellow]{escape(identifier)}: not found[/yellow]")
        sys.exit(1)

    action = "loaded" if load else "resolves to"
    console.print(f"[green]{escape(identifier)}[/green] {action} {escape(winner)}")


def main():
    cli()


if __name__ == "__main__":
    main()
