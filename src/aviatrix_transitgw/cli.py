import typing as t
from pathlib import Path

import typer
from rich import print

from .config_loader import load_local_config
from .config_template import render_template
from .diff import ConfigDiffAnalyzer
from .errors import ConfigValidationError
from .state_store import StateStore

DEFAULT_CONFIG_FILENAME = "aviatrix-transitgw.config.yaml"
DEFAULT_STATE_FILENAME = ".aviatrix-transitgw/last-applied.json"

app = typer.Typer(
    add_completion=False,
    help="""
Aviatrix transit gateway reconciler

By default, the CLI looks for 'aviatrix-transitgw.config.yaml' in your current directory.
Use --local-config-file to specify a different config file if needed.
"""
)


def _resolve_local_config(local_config_file: t.Optional[Path]) -> Path:
    if local_config_file is not None:
        return local_config_file

    default_path = Path.cwd() / DEFAULT_CONFIG_FILENAME
    if not default_path.exists():
        print(f"[red]Error: Config file not found at {default_path}[/red]")
        print("[yellow]Run 'aviatrix-transitgw init' first to create a template config.[/yellow]")
        raise typer.Exit(code=1)
    return default_path


def _resolve_state_file(state_file: t.Optional[Path]) -> Path:
    return state_file if state_file is not None else Path.cwd() / DEFAULT_STATE_FILENAME


@app.command()
def init(
    output: t.Optional[Path] = typer.Option(None, help=f"Where to write the template (default: ./{DEFAULT_CONFIG_FILENAME})"),
):
    """Write a template config file if one does not exist yet."""
    target = output or Path.cwd() / DEFAULT_CONFIG_FILENAME
    if target.exists():
        print(f"[yellow]Config already exists at {target}; not overwriting.[/yellow]")
        raise typer.Exit(code=0)

    target.write_text(render_template(), encoding="utf-8")
    print(f"[green]Created config template at[/green] {target}")
    print("[bold]Please edit the file to fill environment-specific values, then run 'validate-config'.[/bold]")


@app.command()
def validate_config(
    config_file: Path = typer.Argument(
        ...,
        exists=True,
        readable=True,
        help="Path to configuration file to validate"
    ),
):
    """Validate configuration file against schema without contacting the controller.

    Examples:
        aviatrix-transitgw validate-config aviatrix-transitgw.config.yaml
    """
    from rich.console import Console
    from rich.panel import Panel

    console = Console()
    console.print(f"[bold]Validating configuration: {config_file}[/bold]")

    try:
        config = load_local_config(config_file)
    except ConfigValidationError as e:
        console.print()
        console.print(Panel.fit(
            f"[bold red]✗ Configuration validation failed[/bold red]\n\n{e}",
            title="[red]Validation Error[/red]",
            border_style="red"
        ))
        raise typer.Exit(code=1)

    console.print()
    console.print(Panel.fit(
        f"[bold green]✓ Configuration is valid![/bold green]\n\n"
        f"[dim]Summary:[/dim]\n"
        f"  • Gateway: {config.gw_name} ({config.cloud_type.name}, {config.vpc_region})\n"
        f"  • Size: {config.gw_size}\n"
        f"  • HA gateway: {config.ha_gw_name + ' (' + config.ha_gw_size + ')' if config.ha_enabled else 'disabled'}\n"
        f"  • Insane mode: {'on (' + config.insane_mode_az + ')' if config.insane_mode else 'off'}\n"
        f"  • Tags: {len(config.tag_list)}",
        title="[green]Validation Passed[/green]",
        border_style="green"
    ))


@app.command()
def plan(
    local_config_file: t.Optional[Path] = typer.Option(None, exists=True, readable=True, help=f"Path to {DEFAULT_CONFIG_FILENAME}"),
    state_file: t.Optional[Path] = typer.Option(None, help=f"Path to the last-applied baseline (default: ./{DEFAULT_STATE_FILENAME})"),
):
    """Preview changes between the declared config and the last-applied baseline."""
    local_config_file = _resolve_local_config(local_config_file)

    print("[bold]Loading local YAML config...[/bold]")
    try:
        desired = load_local_config(local_config_file)
    except ConfigValidationError as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)

    baseline = StateStore(_resolve_state_file(state_file)).load_last_applied()
    if baseline is None or baseline.config is None:
        print(f"[yellow]No baseline found: gateway '{desired.gw_name}' will be created.[/yellow]")
        if desired.ha_enabled:
            print(f"[yellow]HA gateway '{desired.ha_gw_name}' will be created in {desired.ha_subnet}.[/yellow]")
        return

    diff = ConfigDiffAnalyzer().compare(baseline.config, desired)
    if diff.violates_immutability():
        print("[red]" + diff.format_summary() + "[/red]")
        raise typer.Exit(code=1)
    if diff.has_changes():
        print("[yellow]" + diff.format_summary() + "[/yellow]")
    else:
        print(f"[green]{desired.gw_name}: {diff.format_summary()}[/green]")


@app.command()
def show_state(
    state_file: t.Optional[Path] = typer.Option(None, help=f"Path to the last-applied baseline (default: ./{DEFAULT_STATE_FILENAME})"),
):
    """Show the stored last-applied baseline."""
    from rich.console import Console
    from rich.table import Table

    console = Console()
    path = _resolve_state_file(state_file)
    baseline = StateStore(path).load_last_applied()
    if baseline is None or baseline.config is None:
        console.print(f"[yellow]No baseline stored at {path}[/yellow]")
        raise typer.Exit(code=0)

    table = Table(title=f"Transit Gateway '{baseline.id}'", show_header=True, header_style="bold cyan")
    table.add_column("Attribute", style="white")
    table.add_column("Value", style="white")
    for name, value in baseline.config.model_dump(mode="json").items():
        if isinstance(value, list):
            value = ", ".join(value) or "-"
        table.add_row(name, str(value) if value not in ("", None) else "-")
    console.print(table)
