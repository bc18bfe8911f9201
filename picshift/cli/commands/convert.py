"""Convert command: run a batch and write the results to disk."""

from pathlib import Path
from typing import Annotated

import anyio
import typer
from rich.console import Console
from rich.table import Table

from picshift.config import PicshiftSettings, get_settings
from picshift.config.constants import CODEC_CONFIG_NAME, PLUGIN_NAME
from picshift.core.pipeline import OutputCollector, RunConfig, TransformPipeline
from picshift.core.source import SourceResolver, is_remote
from picshift.exceptions import ConfigurationError
from picshift.image.formats import OutputFormat
from picshift.utils.fs import (
    atomic_write_bytes,
    ensure_directory,
    format_size,
    get_unique_path,
    safe_filename,
)
from picshift.utils.logging import StructlogPipelineLogger, get_logger, setup_task_logging

console = Console()
log = get_logger(__name__)


def convert(
    items: Annotated[
        list[str],
        typer.Argument(help="Local file paths or http(s) URLs to convert."),
    ],
    output_format: Annotated[
        str | None,
        typer.Option(
            "--format",
            "-f",
            help=f"Output format. Options: {', '.join(OutputFormat.choices())}",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory for converted files.",
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ] = None,
    no_size_guard: Annotated[
        bool,
        typer.Option(
            "--no-size-guard",
            help="Always emit the converted bytes, even when larger than the original.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Show conversion plan without executing.",
        ),
    ] = False,
) -> None:
    """Convert images into a single output format.

    Items that fail to fetch or convert are reported and skipped; the
    command still succeeds for the rest.

    Examples:
        picshift convert photo.png
        picshift convert https://example.com/a.jpg -f avif -o ./out
    """
    settings = get_settings()

    task_id, log_path = setup_task_logging(
        log_dir=settings.log_dir,
        prefix="convert",
        verbose=verbose,
        file_level=settings.log_level,
        json_format=settings.log_format == "json",
    )
    if verbose:
        log.info("Logs will be saved to", log_file=str(log_path))
    log.info("Task Configuration", task_id=task_id, config=settings.model_dump(mode="json"))

    plugin_config = dict(settings.get_config(PLUGIN_NAME) or {})
    if output_format:
        plugin_config["outputType"] = output_format

    try:
        run_config = RunConfig.from_sources(
            plugin_config,
            settings.get_config(CODEC_CONFIG_NAME),
            size_guard=settings.size_guard and not no_size_guard,
        )
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    output_dir = output or Path(settings.output_dir)

    if dry_run:
        _show_dry_run(items, run_config, output_dir)
        return

    collector = anyio.run(_execute_conversion, items, run_config, settings, task_id)

    ensure_directory(output_dir)
    written: list[tuple[Path, int, int, int]] = []
    for record in collector:
        target = get_unique_path(output_dir / safe_filename(record.file_name))
        atomic_write_bytes(target, record.buffer)
        written.append((target, len(record.buffer), record.width, record.height))

    log.info(
        "Task Completed",
        task_id=task_id,
        converted=len(written),
        failed=len(collector.failures),
        output_dir=str(output_dir),
    )
    _show_results(written, collector)


async def _execute_conversion(
    items: list[str],
    run_config: RunConfig,
    settings: PicshiftSettings,
    task_id: str,
) -> OutputCollector:
    async with SourceResolver(
        timeout=settings.http.timeout,
        follow_redirects=settings.http.follow_redirects,
        user_agent=settings.http.user_agent,
    ) as resolver:
        pipeline = TransformPipeline(
            run_config,
            resolver=resolver,
            logger=StructlogPipelineLogger("picshift.pipeline", task_id=task_id),
        )
        return await pipeline.run(items)


def _show_dry_run(items: list[str], run_config: RunConfig, output_dir: Path) -> None:
    """Display the conversion plan without executing."""
    console.print("\n[bold blue]Conversion Plan (Dry Run)[/bold blue]\n")
    console.print(f"  [bold]Output Format:[/bold] {run_config.output_format.value}")
    console.print(f"  [bold]Output Directory:[/bold] {output_dir}")
    console.print(f"  [bold]Size Guard:[/bold] {'Enabled' if run_config.size_guard else 'Disabled'}")
    console.print()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Item", style="cyan")
    table.add_column("Source")
    for item in items:
        table.add_row(item, "remote" if is_remote(item) else "local")
    console.print(table)
    console.print()


def _show_results(written: list[tuple[Path, int, int, int]], collector: OutputCollector) -> None:
    if written:
        table = Table(title="Converted", show_header=True, header_style="bold")
        table.add_column("File", style="cyan")
        table.add_column("Size", justify="right")
        table.add_column("Dimensions", justify="right")
        for path, size, width, height in written:
            table.add_row(str(path), format_size(size), f"{width}x{height}")
        console.print(table)

    if collector.failures:
        table = Table(title="Failed", show_header=True, header_style="bold")
        table.add_column("Item", style="cyan")
        table.add_column("Stage", style="yellow")
        table.add_column("Error")
        for failure in collector.failures:
            table.add_row(failure.item, failure.kind, failure.message)
        console.print(table)

    console.print(
        f"[green]{len(written)} converted[/green], "
        f"[{'red' if collector.failures else 'dim'}]{len(collector.failures)} failed[/]"
    )
