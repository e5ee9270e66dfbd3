"""
CLI entry point for glif-mcp.

Administrative commands for the tool namespace and the saved tools file.
The MCP server itself is started by the embedding program; these commands
use the same settings, registry and store so what they show is what a
client would see.

Commands:
    list-tools    Show the composed tool listing for the current settings
    list-saved    Show saved tools
    remove        Remove one saved tool
    reset         Remove every saved tool
    import-ids    Save workflow ids as glif_<id> tools
    show-config   Show the effective settings
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from glifmcp import __version__
from glifmcp.errors import GlifMcpError
from glifmcp.schema import Settings, load_settings
from glifmcp.store.saved import SavedToolStore
from glifmcp.tools.catalog import build_default_registry
from glifmcp.tools.composer import RegistryComposer

app = typer.Typer(
    name="glifmcp",
    help="Inspect glif-mcp tools and manage saved glif tools.",
    add_completion=False,
    no_args_is_help=True,
)

# Rich console for formatted output
console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option(
        "--config",
        "-c",
        help="Path to a YAML settings file (defaults to $GLIF_MCP_CONFIG).",
        exists=True,
        readable=True,
        resolve_path=True,
    ),
]

VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", help="Enable debug logging on stderr."),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Output results in JSON format."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]glifmcp[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    glif-mcp - glif workflows as MCP tools.

    Settings come from an optional YAML file overlaid by environment
    variables (GLIF_IDS, IGNORE_DISCOVERY_TOOLS, BOT_TOOLS, ...).
    """
    pass


def _configure_logging(debug: bool) -> None:
    """Send log records to stderr; stdout belongs to command output."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(config: Optional[Path], verbose: bool) -> Settings:
    """Load settings and set up logging, exiting on invalid configuration."""
    try:
        settings = load_settings(config_path=config)
    except (OSError, ValidationError, ValueError) as e:
        console.print(f"[red]Error loading settings: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    _configure_logging(verbose or settings.debug)
    return settings


def _exit_on_error(e: GlifMcpError) -> NoReturn:
    console.print(f"[red]{escape(str(e))}[/red]")
    raise typer.Exit(code=1)


@app.command("list-tools")
def list_tools(
    config: ConfigOption = None,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """
    Show the tools a client would be offered right now.

    Example:
        $ BOT_TOOLS=1 glifmcp list-tools
    """
    settings = _load(config, verbose)
    composer = RegistryComposer(build_default_registry(), settings_provider=lambda: settings)
    definitions = asyncio.run(composer.list_tools())

    if json_output:
        print(json.dumps([d.model_dump(mode="json", exclude_none=True) for d in definitions], indent=2))
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", style="dim", width=3)
    table.add_column("Tool", style="cyan")
    table.add_column("Description")
    for index, definition in enumerate(definitions, start=1):
        description = definition.description or ""
        if len(description) > 60:
            description = description[:57] + "..."
        table.add_row(str(index), definition.name, escape(description))

    console.print(table)
    console.print(f"[dim]Total: {len(definitions)} tools[/dim]")


@app.command("list-saved")
def list_saved(
    config: ConfigOption = None,
    verbose: VerboseOption = False,
    json_output: JsonOption = False,
) -> None:
    """Show saved glif tools."""
    settings = _load(config, verbose)
    store = SavedToolStore(settings.saved_tools_path)
    result = asyncio.run(store.read())

    if json_output:
        print(json.dumps([b.to_json_dict() for b in result.bindings], indent=2))
        return

    if result.recovered:
        console.print(f"[yellow]Ignoring content of saved tools file {store.path}: {escape(result.reason or '')}[/yellow]")
    if not result.bindings:
        console.print("[dim]No saved glif tools found.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Tool", style="cyan")
    table.add_column("Glif ID")
    table.add_column("Name")
    table.add_column("Saved", style="dim")
    for binding in result.bindings:
        table.add_row(
            binding.tool_name,
            binding.source_id,
            escape(binding.display_name),
            f"{binding.created_at:%Y-%m-%d %H:%M}",
        )
    console.print(table)


@app.command()
def remove(
    tool_name: Annotated[str, typer.Argument(help="Tool name of the saved glif to remove.")],
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Remove one saved glif tool."""
    settings = _load(config, verbose)
    store = SavedToolStore(settings.saved_tools_path)
    try:
        removed = asyncio.run(store.remove(tool_name))
    except GlifMcpError as e:
        _exit_on_error(e)

    if not removed:
        console.print(f"[yellow]Tool {escape(repr(tool_name))} not found[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] Removed tool [bold]{tool_name}[/bold]")


@app.command()
def reset(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Don't ask for confirmation."),
    ] = False,
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Remove every saved glif tool."""
    settings = _load(config, verbose)
    store = SavedToolStore(settings.saved_tools_path)
    if not yes:
        typer.confirm(f"Remove all saved tools in {store.path}?", abort=True)

    try:
        count = asyncio.run(store.remove_all())
    except GlifMcpError as e:
        _exit_on_error(e)
    console.print(f"[green]✓[/green] Removed all {count} saved glif tools")


@app.command("import-ids")
def import_ids(
    ids: Annotated[str, typer.Argument(help="Comma-separated glif ids.")],
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Save glif ids as tools named glif_<id>.

    Example:
        $ glifmcp import-ids "cm2v9kx3r0000,cm2v9kx3r0001"
    """
    settings = _load(config, verbose)
    store = SavedToolStore(settings.saved_tools_path)
    try:
        imported = asyncio.run(store.import_ids(ids))
    except GlifMcpError as e:
        _exit_on_error(e)

    if not imported:
        console.print("[yellow]No glif ids given[/yellow]")
        raise typer.Exit(code=1)
    for binding in imported:
        console.print(f"[green]✓[/green] {binding.source_id} → [cyan]{binding.tool_name}[/cyan]")


@app.command("show-config")
def show_config(
    config: ConfigOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show the effective settings after the environment overlay."""
    settings = _load(config, verbose)
    print(json.dumps(settings.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    app()
