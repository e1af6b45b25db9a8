"""Rich-based display functions for Gmail Unsubscriber."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.prompt import Prompt
from rich.table import Table

from .models import DetectionMethod, ScanReport, UnsubscribeResult

console = Console()

_METHOD_COLOR = {
    DetectionMethod.HEADER: "red",
    DetectionMethod.BODY_LINK: "yellow",
    DetectionMethod.NONE: "green",
}


def display_results(report: ScanReport, show_all: bool = False) -> None:
    """Display newsletters found by a scan (every admitted message with show_all)."""
    rows = report.results if show_all else report.newsletters

    table = Table(title="Newsletters")
    table.add_column("#", justify="right", style="dim")
    table.add_column("From")
    table.add_column("Subject")
    table.add_column("Method")
    table.add_column("Unsubscribe")

    for idx, result in enumerate(rows, start=1):
        color = _METHOD_COLOR[result.method]
        if result.action:
            target = escape(result.action.describe())
        else:
            target = f"[dim]{escape(result.note or '-')}[/dim]"
        table.add_row(
            str(idx),
            escape(result.sender or ""),
            escape(result.subject or ""),
            f"[{color}]{result.method.value}[/{color}]",
            target,
        )

    console.print(table)
    failed = sum(1 for r in report.results if r.note and r.method is DetectionMethod.NONE)
    console.print(
        Panel(
            f"Messages listed: {report.total_messages}  |  "
            f"Admitted: {report.admitted}  |  "
            f"Newsletters: {len(report.newsletters)}  |  "
            f"Errors: {failed}",
            title="Summary",
        )
    )


def create_progress(description: str) -> Progress:
    """Create a configured Rich Progress bar."""
    return Progress(
        SpinnerColumn(),
        TextColumn(f"[bold blue]{description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    )


def describe_result(result: UnsubscribeResult) -> str:
    return f"{result.sender or '?'}: {result.subject or '(no subject)'}"


def confirm_trash(descriptions: list[str], heading: str) -> bool:
    """Prompt the user to confirm trashing the described messages."""
    lines = [f"[bold]{heading}[/bold]", ""]
    for description in descriptions[:10]:
        lines.append(f"  - {escape(description)}")
    if len(descriptions) > 10:
        lines.append(f"  ... and {len(descriptions) - 10} more")
    lines.append("")
    lines.append(f"[bold]Total messages to trash: {len(descriptions)}[/bold]")

    console.print(Panel("\n".join(lines), title="Confirm Trash"))

    answer = Prompt.ask('[bold red]Type "TRASH" to confirm[/bold red]', console=console)
    return answer == "TRASH"


def display_clean_summary(trashed_count: int) -> None:
    """Display a success summary after trashing messages."""
    console.print(
        Panel(
            f"[bold green]Successfully trashed {trashed_count} messages.[/bold green]",
            title="Done",
        )
    )
