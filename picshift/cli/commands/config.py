"""Config command for configuration management."""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from picshift.config import config_schema, get_settings, reload_settings, write_config_values
from picshift.config.constants import (
    CODEC_CONFIG_NAME,
    CONFIG_LOCATIONS,
    DEFAULT_CONFIG_FILE,
    PLUGIN_NAME,
)
from picshift.core.pipeline import RunConfig
from picshift.exceptions import ConfigurationError
from picshift.image.encoder import check_codec_support
from picshift.image.formats import OutputFormat

config_app = typer.Typer(help="Configuration management.")
console = Console()


@config_app.command("show")
def show() -> None:
    """Show current configuration."""
    settings = get_settings()

    console.print("\n[bold blue]Current Configuration[/bold blue]\n")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    output_type = settings.plugin.output_type
    table.add_row("Output Type", output_type.value if output_type else "(not set)")
    try:
        effective = RunConfig.from_settings(settings)
        table.add_row("Effective Output Type", effective.output_format.value)
    except ConfigurationError as e:
        table.add_row("Effective Output Type", f"[red]invalid: {e}[/red]")
    table.add_row(
        "Codec Options",
        json.dumps(settings.get_config(CODEC_CONFIG_NAME), ensure_ascii=False),
    )
    table.add_row("Size Guard", str(settings.size_guard))
    table.add_row("HTTP Timeout", f"{settings.http.timeout}s")
    table.add_row("Follow Redirects", str(settings.http.follow_redirects))
    table.add_row("Log Level", settings.log_level)
    table.add_row("Log Format", settings.log_format)
    table.add_row("Log Directory", settings.log_dir)
    table.add_row("Output Directory", settings.output_dir)

    console.print(table)
    console.print()


# Default configuration template
DEFAULT_CONFIG_TEMPLATE = """# Picshift Configuration

plugin:
  output_type: "webp"  # jpeg, png, gif, webp, avif, heif

codec:
  output_options:  # Encoder options per output format
    webp:
      quality: 80
      # lossless: false
      # method: 4  # 0-6, higher = slower and smaller
    avif:
      quality: 60
      # speed: 6  # 0-10, higher = faster
    jpeg:
      quality: 85
      progressive: true
    # png:
    #   compress_level: 9
  # input_options:  # Decoder options per output format
  #   webp:
  #     auto_orient: true
  #     animated: true
  #     limit_input_pixels: 100000000
  #     fail_on: "warning"  # none, truncated, warning, error

size_guard: true  # Keep the original bytes when conversion makes the file larger

http:
  timeout: 30
  follow_redirects: true

log_level: "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
log_format: "console"  # console, json
output_dir: "output"
"""


@config_app.command("init")
def init(
    path: Annotated[
        Path | None,
        typer.Option(
            "--path",
            "-p",
            help="Path to create config file.",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing config file.",
        ),
    ] = False,
) -> None:
    """Initialize a configuration file."""
    config_path = path or Path.cwd() / DEFAULT_CONFIG_FILE

    if config_path.exists() and not force:
        console.print(f"[red]Error:[/red] Config file already exists at {config_path}")
        console.print("Use --force to overwrite.")
        raise typer.Exit(1)

    config_path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    console.print(f"[green]Created config file at:[/green] {config_path}")


@config_app.command("schema")
def schema() -> None:
    """Print the configuration schema as JSON."""
    settings = get_settings()
    fields = [f.to_dict() for f in config_schema(settings.get_config(PLUGIN_NAME))]
    console.print_json(json.dumps(fields, ensure_ascii=False))


@config_app.command("set-format")
def set_format(
    output_format: Annotated[
        str,
        typer.Argument(help=f"Output format. Options: {', '.join(OutputFormat.choices())}"),
    ],
    path: Annotated[
        Path | None,
        typer.Option(
            "--path",
            "-p",
            help="Config file to update.",
        ),
    ] = None,
) -> None:
    """Persist the output format in a config file."""
    try:
        fmt = OutputFormat.parse(output_format)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    config_path = path or Path.cwd() / DEFAULT_CONFIG_FILE
    write_config_values(config_path, {"plugin.output_type": fmt.value})
    reload_settings()
    console.print(f"[green]Output format set to[/green] {fmt.value} [dim]({config_path})[/dim]")


@config_app.command("formats")
def formats() -> None:
    """Show which output formats the installed codecs can write."""
    table = Table(show_header=True, header_style="bold")
    table.add_column("Format", style="cyan")
    table.add_column("Available")

    for name, available in check_codec_support().items():
        table.add_row(name, "[green]yes[/green]" if available else "[red]no[/red]")

    console.print(table)


@config_app.command("locations")
def locations() -> None:
    """Show configuration file search locations."""
    console.print("\n[bold blue]Configuration File Locations[/bold blue]\n")
    console.print("Picshift searches for configuration files in the following order:\n")

    for i, loc in enumerate(CONFIG_LOCATIONS, 1):
        exists = "[green]exists[/green]" if loc.exists() else "[dim]not found[/dim]"
        console.print(f"  {i}. {loc} ({exists})")

    console.print()
    console.print("[dim]Environment variables with PICSHIFT_ prefix are also supported.[/dim]")
    console.print()
