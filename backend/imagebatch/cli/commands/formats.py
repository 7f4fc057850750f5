"""
Formats Command
List output formats and how quality applies to them
"""

from rich.console import Console
from rich.table import Table

from imagebatch.config import settings
from imagebatch.core.conversion.codec import format_encoder
from imagebatch.models.conversion import OutputFormat

console = Console()


def list_formats():
    """
    Show supported output formats
    """
    table = Table(title="Output Formats", show_header=True)
    table.add_column("Format", style="cyan")
    table.add_column("MIME Type")
    table.add_column("Quality", style="dim")
    table.add_column("Available")

    for fmt in OutputFormat:
        available = fmt.value in format_encoder.available_formats
        table.add_row(
            fmt.value.upper(),
            fmt.mime_type,
            "ignored (lossless)" if fmt.is_lossless else "applied",
            "[green]yes[/green]" if available else "[red]no[/red]",
        )

    console.print(table)
    console.print(
        f"Accepted inputs: {', '.join(settings.accepted_mime_types)} "
        f"(max {settings.max_files_per_drop} per run)"
    )
