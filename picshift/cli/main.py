"""Main CLI application using Typer."""

from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from picshift import __version__
from picshift.cli.commands.config import config_app
from picshift.cli.commands.convert import convert

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="picshift",
    help="Fetch images from paths or URLs and re-encode them into one format.",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console()

app.command(name="convert", help="Convert images to the configured output format.")(convert)
app.add_typer(config_app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Picshift[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Picshift - image format conversion for upload pipelines."""
    pass


if __name__ == "__main__":
    app()
