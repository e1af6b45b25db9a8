"""Scan orchestration - fetches messages, filters, classifies."""

from __future__ import annotations

import logging
from typing import Iterable

from .constants import ADMISSION_LABELS, BATCH_SIZE
from .detector import detect_newsletter
from .display import console, create_progress
from .gmail_client import fetch_messages, list_message_ids
from .models import DetectionMethod, MessageView, ScanReport, UnsubscribeResult
from .reporter import log_result

logger = logging.getLogger(__name__)


def is_admitted(view: MessageView, required_labels: Iterable[str] = ADMISSION_LABELS) -> bool:
    """Return True when the message carries every required label."""
    return all(label in view.label_ids for label in required_labels)


def classify_views(views: Iterable[MessageView]) -> list[UnsubscribeResult]:
    """Classify each view independently; one failure never stops the rest."""
    results: list[UnsubscribeResult] = []
    for view in views:
        try:
            result = detect_newsletter(view)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Classification failed for message %s", view.message_id)
            result = UnsubscribeResult(
                message_id=view.message_id,
                is_newsletter=False,
                method=DetectionMethod.NONE,
                note=f"classification failed: {exc}",
            )
        log_result(result)
        results.append(result)
    return results


def _fetch_failure(message_id: str, error: str) -> UnsubscribeResult:
    return UnsubscribeResult(
        message_id=message_id,
        is_newsletter=False,
        method=DetectionMethod.NONE,
        note=f"fetch failed: {error}",
    )


def fetch_admitted(
    service,
    query: str | None = None,
    max_results: int | None = None,
    required_labels: Iterable[str] = ADMISSION_LABELS,
) -> tuple[int, list[MessageView], dict[str, str]]:
    """List and fetch messages, keeping those that pass the admission filter.

    Returns (number of ids listed, admitted views, fetch errors by id).
    """
    required_labels = tuple(required_labels)

    # Step 1: List message IDs
    console.print("[bold]Step 1/3:[/bold] Listing message IDs...")
    with create_progress("Listing messages") as progress:
        task = progress.add_task("listing", total=None)
        ids = list_message_ids(service, query=query, max_results=max_results)
        progress.update(task, completed=len(ids), total=len(ids))

    console.print(f"  Found [bold]{len(ids)}[/bold] messages")

    if not ids:
        return 0, [], {}

    # Step 2: Fetch messages, every batch joined before moving on
    console.print("[bold]Step 2/3:[/bold] Fetching messages...")
    with create_progress("Fetching messages") as progress:
        total_batches = (len(ids) + BATCH_SIZE - 1) // BATCH_SIZE
        task = progress.add_task("fetching", total=total_batches)

        def on_batch(batch_num: int, total: int) -> None:
            progress.update(task, completed=batch_num)

        views, errors = fetch_messages(service, ids, callback=on_batch)

    console.print(f"  Fetched [bold]{len(views)}[/bold] messages")
    if errors:
        console.print(f"  [yellow]{len(errors)} messages could not be fetched[/yellow]")

    admitted = [v for v in views if is_admitted(v, required_labels)]
    logger.info("%d of %d messages admitted (labels=%s)", len(admitted), len(views), required_labels)
    return len(ids), admitted, errors


def scan_mailbox(
    service,
    query: str | None = None,
    max_results: int | None = None,
    required_labels: Iterable[str] = ADMISSION_LABELS,
) -> ScanReport:
    """Run a full scan: list IDs, fetch messages, filter by labels, classify."""
    total, admitted, errors = fetch_admitted(
        service, query=query, max_results=max_results, required_labels=required_labels
    )
    if not total:
        return ScanReport(total_messages=0, query=query or "")

    # Step 3: Classify
    console.print("[bold]Step 3/3:[/bold] Detecting newsletters...")
    results = classify_views(admitted)
    for msg_id, error in errors.items():
        failure = _fetch_failure(msg_id, error)
        log_result(failure)
        results.append(failure)

    return ScanReport(
        total_messages=total,
        admitted=len(admitted),
        results=results,
        query=query or "",
    )
