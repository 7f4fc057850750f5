"""
Main CLI Application
Core Typer application with commands and global logging options
"""

from typing import Annotated, Optional

import typer
from rich.console import Console

from imagebatch.cli import __version__
from imagebatch.cli.commands import convert, formats, pdf
from imagebatch.config import settings
from imagebatch.utils.logging import setup_logging

console = Console()

app = typer.Typer(
    name="imagebatch",
    help="Convert batches of images between JPG, PNG, WebP and GIF",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"imagebatch {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Log progress details")
    ] = False,
    debug: Annotated[bool, typer.Option("--debug", help="Enable debug logging")] = False,
    json_logs: Annotated[
        bool, typer.Option("--json-logs", help="Emit logs as JSON")
    ] = settings.json_logs,
):
    """
    Image Batch Converter - convert, zip and merge images into PDF

    [bold green]Quick Start:[/bold green]

      [cyan]imagebatch convert *.png -f webp -q 80[/cyan]
      [cyan]imagebatch convert *.jpg -f png --zip --pdf -o out/[/cyan]
      [cyan]imagebatch pdf scans/*.jpg[/cyan]
    """
    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = settings.log_level

    setup_logging(
        log_level=log_level,
        json_logs=json_logs,
        enable_file_logging=settings.logging_enabled,
        log_dir=settings.log_dir,
        max_log_size_mb=settings.max_log_size_mb,
        backup_count=settings.log_backup_count,
    )


app.command(name="convert", no_args_is_help=True)(convert.convert_images)
app.command(name="pdf", no_args_is_help=True)(pdf.images_to_pdf)
app.command(name="formats")(formats.list_formats)


if __name__ == "__main__":
    app()
