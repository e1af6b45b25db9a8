"""CLI entry point for Gmail Unsubscriber."""

from __future__ import annotations

from pathlib import Path

import click

from . import constants
from .auth import check_auth, get_gmail_service
from .cleaner import sweep_categories, trash_newsletters
from .constants import ADMISSION_LABELS, DEFAULT_QUERY, SWEEP_LABELS
from .display import console, display_results
from .export import archive_views, export_results
from .gmail_client import list_message_ids
from .log import configure_logging
from .scanner import fetch_admitted, scan_mailbox


def _service():
    try:
        return get_gmail_service()
    except FileNotFoundError as e:
        raise click.ClickException(str(e)) from e


def _scan_options(func):
    func = click.option(
        "-l",
        "--label",
        "labels",
        multiple=True,
        default=ADMISSION_LABELS,
        show_default=True,
        help="Label a message must carry to be examined (repeatable).",
    )(func)
    func = click.option("-m", "--max-messages", default=None, type=int, help="Maximum messages to list.")(func)
    func = click.option(
        "-q", "--query", default=DEFAULT_QUERY, show_default=True, help="Gmail search query."
    )(func)
    return func


@click.group()
@click.version_option(version="0.1.0", prog_name="gmail-unsubscriber")
@click.option("-v", "--verbose", is_flag=True, help="Log every classified message.")
def cli(verbose: bool) -> None:
    """Gmail Unsubscriber - find newsletters and how to unsubscribe from them."""
    configure_logging(verbose)


@cli.command()
@_scan_options
@click.option("--all", "show_all", is_flag=True, help="Show non-newsletters too.")
def scan(query: str, max_messages: int | None, labels: tuple[str, ...], show_all: bool) -> None:
    """Detect newsletters and show their unsubscribe targets."""
    report = scan_mailbox(_service(), query=query, max_results=max_messages, required_labels=labels)
    display_results(report, show_all=show_all)


@cli.command()
@_scan_options
@click.option("--execute", is_flag=True, help="Actually trash messages (default is dry-run).")
def clean(query: str, max_messages: int | None, labels: tuple[str, ...], execute: bool) -> None:
    """Detect newsletters and move them to the trash."""
    service = _service()
    report = scan_mailbox(service, query=query, max_results=max_messages, required_labels=labels)
    display_results(report)
    trash_newsletters(service, report, execute=execute)


@cli.command()
@click.option("-q", "--query", default=None, help="Gmail search query (default: every message).")
@click.option("-m", "--max-messages", default=None, type=int, help="Maximum messages to list.")
@click.option(
    "-c",
    "--category",
    "categories",
    multiple=True,
    default=SWEEP_LABELS,
    show_default=True,
    help="Category label to sweep (repeatable).",
)
@click.option("--execute", is_flag=True, help="Actually trash messages (default is dry-run).")
def sweep(query: str | None, max_messages: int | None, categories: tuple[str, ...], execute: bool) -> None:
    """Trash every message filed under the social or promotions categories."""
    service = _service()
    ids = list_message_ids(service, query=query, max_results=max_messages)
    if not ids:
        console.print("No messages found.")
        return
    sweep_categories(service, ids, labels=categories, execute=execute)


@cli.command()
@_scan_options
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the .html files (default: ~/.gmail-unsubscriber/data).",
)
def archive(query: str, max_messages: int | None, labels: tuple[str, ...], output_dir: Path | None) -> None:
    """Save the HTML body of each examined message, named after its subject."""
    output_dir = output_dir or constants.DATA_DIR
    _, views, _ = fetch_admitted(_service(), query=query, max_results=max_messages, required_labels=labels)

    console.print("[bold]Step 3/3:[/bold] Writing HTML bodies...")
    written, errors = archive_views(views, output_dir)
    console.print(f"  Saved [bold]{len(written)}[/bold] files to {output_dir}")
    if errors:
        console.print(f"  [yellow]{len(errors)} bodies could not be decoded[/yellow]")


@cli.command(name="export")
@_scan_options
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "json"]),
    default="csv",
    help="Output format.",
)
@click.option("-o", "--output", required=True, help="Output file path.")
def export_cmd(query: str, max_messages: int | None, labels: tuple[str, ...], fmt: str, output: str) -> None:
    """Scan and export every classification to CSV or JSON."""
    report = scan_mailbox(_service(), query=query, max_results=max_messages, required_labels=labels)
    export_results(report, format=fmt, output_path=output)


@cli.command()
def auth() -> None:
    """Test Gmail authentication."""
    if not check_auth():
        raise SystemExit(1)
