"""
PDF Command
Merge original images into a single paginated document
"""

import asyncio
from pathlib import Path
from typing import Annotated, List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from imagebatch.cli.utils.progress import create_progress_bar, progress_updater
from imagebatch.config import settings
from imagebatch.core.delivery import FileDelivery
from imagebatch.core.exceptions import DeliveryError
from imagebatch.core.session import ConversionSession

console = Console()


def images_to_pdf(
    files: Annotated[
        List[Path],
        typer.Argument(
            help="Input image files, one page each", exists=True, dir_okay=False
        ),
    ],
    output_dir: Annotated[
        Path, typer.Option("-o", "--output-dir", help="Directory for the PDF")
    ] = Path(settings.output_dir),
    max_files: Annotated[
        Optional[int],
        typer.Option("--max-files", min=1, help="Maximum files accepted per run"),
    ] = None,
):
    """
    Merge images into converted-images.pdf, one image per A4 page

    Examples:
      imagebatch pdf scan1.jpg scan2.jpg -o out/
    """
    session = ConversionSession(delivery=FileDelivery(output_dir), max_files=max_files)
    added = session.add_paths(files)
    if len(added) < len(files):
        console.print(
            f"[yellow]Skipped {len(files) - len(added)} file(s)[/yellow]"
        )
    if not added:
        console.print("[red]No supported images to merge[/red]")
        raise typer.Exit(1)

    with create_progress_bar(console) as progress:
        task_id = progress.add_task("Building PDF", total=len(added))
        outcome = asyncio.run(
            session.build_document(progress_updater(progress, task_id, "Building PDF"))
        )

    if not outcome.ok:
        console.print(
            f"[red]✗ Could not create {outcome.filename}: "
            f"{escape(outcome.error or 'unknown error')}[/red]"
        )
        raise typer.Exit(1)

    try:
        path = session.deliver_outcome(outcome)
    except DeliveryError as e:
        console.print(f"[red]✗ {escape(e.message)}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Saved {escape(str(path))} ({len(added)} pages)")
