"""Trash workflows - newsletters found by a scan, or whole Gmail categories."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Iterable

from . import constants
from .constants import BATCH_SIZE, SWEEP_LABELS, TRASH_BATCH_SIZE
from .display import (
    confirm_trash,
    console,
    create_progress,
    describe_result,
    display_clean_summary,
)
from .gmail_client import fetch_labels, trash_messages
from .models import ScanReport

logger = logging.getLogger(__name__)


def _save_trash_log(reason: str, message_ids: list[str]) -> None:
    """Append a trash action to the audit log."""
    log_path = constants.TRASH_LOG_PATH
    log_path.parent.mkdir(parents=True, exist_ok=True)

    log: list = []
    if log_path.exists():
        with open(log_path) as f:
            try:
                log = json.load(f)
            except json.JSONDecodeError:
                logger.warning("Trash log %s is corrupt, starting a new one", log_path)
                log = []

    log.append(
        {
            "date": datetime.now().isoformat(),
            "reason": reason,
            "total_messages": len(message_ids),
            "message_ids": message_ids,
        }
    )

    with open(log_path, "w") as f:
        json.dump(log, f, indent=2)


def _trash_with_progress(service, message_ids: list[str]) -> int:
    with create_progress("Trashing messages") as progress:
        total_batches = max(1, (len(message_ids) + TRASH_BATCH_SIZE - 1) // TRASH_BATCH_SIZE)
        task = progress.add_task("trashing", total=total_batches)

        def on_batch(batch_num: int, total: int) -> None:
            progress.update(task, completed=batch_num)

        return trash_messages(service, message_ids, callback=on_batch)


def trash_newsletters(service, report: ScanReport, execute: bool = False) -> dict:
    """Trash every message a scan classified as a newsletter.

    Returns a summary dict with keys: newsletters, trashed.
    """
    newsletters = report.newsletters
    if not newsletters:
        console.print("[yellow]No newsletters to trash.[/yellow]")
        return {"newsletters": 0, "trashed": 0}

    if not execute:
        console.print(
            f"\n[yellow][DRY RUN] {len(newsletters)} newsletters would be trashed. "
            "Use --execute to actually trash messages.[/yellow]"
        )
        return {"newsletters": len(newsletters), "trashed": 0}

    if not confirm_trash(
        [describe_result(r) for r in newsletters],
        "The following newsletters will be trashed:",
    ):
        console.print("[dim]Cancelled.[/dim]")
        return {"newsletters": len(newsletters), "trashed": 0}

    message_ids = [r.message_id for r in newsletters]
    trashed = _trash_with_progress(service, message_ids)
    _save_trash_log("newsletter", message_ids)
    display_clean_summary(trashed)

    return {"newsletters": len(newsletters), "trashed": trashed}


def select_by_labels(labels_by_id: dict[str, list[str]], labels: Iterable[str]) -> list[str]:
    """Return ids of messages carrying at least one of *labels*."""
    wanted = set(labels)
    return [msg_id for msg_id, msg_labels in labels_by_id.items() if wanted.intersection(msg_labels)]


def sweep_categories(
    service,
    message_ids: list[str],
    labels: Iterable[str] = SWEEP_LABELS,
    execute: bool = False,
) -> dict:
    """Trash every listed message filed under one of the given categories.

    Returns a summary dict with keys: matched, trashed, failed. Messages whose
    labels could not be fetched are counted as failed and never trashed.
    """
    labels = tuple(labels)
    with create_progress("Fetching labels") as progress:
        total_batches = (len(message_ids) + BATCH_SIZE - 1) // BATCH_SIZE
        task = progress.add_task("labels", total=total_batches)

        def on_batch(batch_num: int, total: int) -> None:
            progress.update(task, completed=batch_num)

        labels_by_id, errors = fetch_labels(service, message_ids, callback=on_batch)

    if errors:
        console.print(f"  [yellow]{len(errors)} messages could not be fetched and were skipped[/yellow]")

    matched = select_by_labels(labels_by_id, labels)
    console.print(f"  [bold]{len(matched)}[/bold] of {len(message_ids)} messages in {', '.join(labels)}")

    if not matched:
        return {"matched": 0, "trashed": 0, "failed": len(errors)}

    if not execute:
        console.print(
            "\n[yellow][DRY RUN] No messages were trashed. "
            "Use --execute to actually trash messages.[/yellow]"
        )
        return {"matched": len(matched), "trashed": 0, "failed": len(errors)}

    if not confirm_trash(matched, f"Messages in {', '.join(labels)} will be trashed:"):
        console.print("[dim]Cancelled.[/dim]")
        return {"matched": len(matched), "trashed": 0, "failed": len(errors)}

    trashed = _trash_with_progress(service, matched)
    _save_trash_log("sweep:" + ",".join(labels), matched)
    display_clean_summary(trashed)

    return {"matched": len(matched), "trashed": trashed, "failed": len(errors)}
