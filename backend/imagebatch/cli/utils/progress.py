"""
Progress Display Utilities
Rich progress bars driven by ProgressState updates
"""

from typing import Callable, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.markup import escape
from rich.text import Text

from imagebatch.core.batch.models import BatchItemStatus, ProgressState


class PercentageColumn(ProgressColumn):
    """Custom percentage column with color coding"""

    def render(self, task: Task) -> Text:
        """Render the percentage with color based on progress"""
        if task.total is None or task.percentage is None:
            return Text("")

        percentage = task.percentage
        if percentage < 33:
            style = "red"
        elif percentage < 66:
            style = "yellow"
        else:
            style = "green"

        return Text(f"{percentage:.0f}%", style=style)


def create_progress_bar(console: Optional[Console] = None) -> Progress:
    """Create the progress bar used for conversion and PDF runs"""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        MofNCompleteColumn(),
        BarColumn(complete_style="green", finished_style="bright_green"),
        PercentageColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def progress_updater(
    progress: Progress, task_id: TaskID, label: str
) -> Callable[[ProgressState], None]:
    """Build a progress callback that advances ``task_id``"""

    def _update(state: ProgressState) -> None:
        marker = "[red]✗[/red]" if state.status == BatchItemStatus.FAILED else ""
        progress.update(
            task_id,
            completed=state.current,
            total=state.total,
            description=f"{label} {escape(state.filename or '')} {marker}".rstrip(),
        )

    return _update
