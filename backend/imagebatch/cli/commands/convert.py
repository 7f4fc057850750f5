"""
Convert Command
Batch conversion with progress, zip export and optional PDF of the originals
"""

import asyncio
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from imagebatch.cli.utils.progress import create_progress_bar, progress_updater
from imagebatch.config import settings
from imagebatch.core.batch.manager import BatchManager
from imagebatch.core.batch.models import BatchResult
from imagebatch.core.delivery import FileDelivery
from imagebatch.core.exceptions import DeliveryError, ValidationError
from imagebatch.core.session import ConversionSession, OperationOutcome
from imagebatch.models.conversion import ConversionRequest

console = Console()


def convert_images(
    files: Annotated[
        List[Path],
        typer.Argument(
            help="Input image files", exists=True, dir_okay=False, readable=True
        ),
    ],
    format: Annotated[
        str, typer.Option("-f", "--format", help="Output format (jpg, png, webp, gif)")
    ] = settings.default_format,
    quality: Annotated[
        int,
        typer.Option(
            "-q", "--quality", min=10, max=100, help="Quality, 10-100 in steps of 5"
        ),
    ] = settings.default_quality,
    output_dir: Annotated[
        Path, typer.Option("-o", "--output-dir", help="Directory for results")
    ] = Path(settings.output_dir),
    as_zip: Annotated[
        bool, typer.Option("--zip", help="Bundle results into converted-images.zip")
    ] = False,
    as_pdf: Annotated[
        bool,
        typer.Option("--pdf", help="Also merge the originals into converted-images.pdf"),
    ] = False,
    max_files: Annotated[
        Optional[int],
        typer.Option("--max-files", min=1, help="Maximum files accepted per run"),
    ] = None,
    jobs: Annotated[
        int, typer.Option("-j", "--jobs", min=1, help="Concurrent conversions")
    ] = settings.batch_concurrency,
):
    """
    Convert images to one format and quality

    Examples:
      imagebatch convert *.png -f webp -q 75 -o out/
      imagebatch convert photos/*.jpg -f png --zip
    """
    try:
        request = ConversionRequest.build(format, quality)
    except ValidationError as e:
        console.print(f"[red]Invalid options:[/red] {escape(e.message)}")
        raise typer.Exit(2)

    session = ConversionSession(
        request=request,
        batch_manager=BatchManager(concurrency=jobs),
        delivery=FileDelivery(output_dir),
        max_files=max_files,
    )
    added = session.add_paths(files)
    _report_skipped(len(files), len(added))
    if not added:
        console.print("[red]No supported images to convert[/red]")
        raise typer.Exit(1)

    with create_progress_bar(console) as progress:
        task_id = progress.add_task("Converting", total=len(added))
        batch = asyncio.run(
            session.convert(
                progress_callback=progress_updater(progress, task_id, "Converting")
            )
        )

    show_batch_summary(batch)
    produced = 0

    if batch.converted:
        if as_zip:
            outcome = asyncio.run(session.build_archive())
            produced += _deliver(session, outcome)
        else:
            for image in session.results:
                try:
                    path = session.deliver_image(image)
                except DeliveryError as e:
                    console.print(f"[red]✗ {escape(e.message)}[/red]")
                    continue
                console.print(f"[green]✓[/green] Saved {escape(str(path))}")
                produced += 1

    if as_pdf:
        with create_progress_bar(console) as progress:
            task_id = progress.add_task("Building PDF", total=len(added))
            outcome = asyncio.run(
                session.build_document(
                    progress_updater(progress, task_id, "Building PDF")
                )
            )
        produced += _deliver(session, outcome)

    if not produced:
        raise typer.Exit(1)


def show_batch_summary(batch: BatchResult) -> None:
    """Print converted and failed items"""
    table = Table(title="Conversion Results", show_header=True)
    table.add_column("Input", style="cyan")
    table.add_column("Output", style="green")
    table.add_column("Size", justify="right")

    for image in batch.converted:
        table.add_row(
            escape(image.original.name),
            escape(image.filename),
            f"{image.size / 1024:.1f} KB",
        )
    for failure in batch.failures:
        table.add_row(
            escape(failure.filename), "[red]failed[/red]", escape(failure.error_message)
        )

    console.print(table)
    console.print(
        f"{batch.succeeded} converted, {batch.failed} failed "
        f"of {batch.total_files} in {batch.processing_time:.2f}s"
    )


def _deliver(session: ConversionSession, outcome: OperationOutcome) -> int:
    try:
        path = session.deliver_outcome(outcome)
    except DeliveryError as e:
        console.print(f"[red]✗ {escape(e.message)}[/red]")
        return 0
    if path is None:
        console.print(
            f"[red]✗ Could not create {outcome.filename}: "
            f"{escape(outcome.error or 'unknown error')}[/red]"
        )
        return 0
    console.print(f"[green]✓[/green] Saved {escape(str(path))}")
    return 1


def _report_skipped(requested: int, accepted: int) -> None:
    skipped = requested - accepted
    if skipped > 0:
        console.print(
            f"[yellow]Skipped {skipped} file(s): unsupported type, duplicate "
            f"or over the per-run limit[/yellow]"
        )

