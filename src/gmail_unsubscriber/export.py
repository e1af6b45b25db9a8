"""Export scan results to CSV or JSON, and archive HTML bodies to disk."""

from __future__ import annotations

import csv
import json
import logging
import re
from pathlib import Path

from .body import decode_part, locate_html_part
from .constants import MAX_FILENAME_LENGTH
from .errors import DecodeError
from .headers import find_header
from .models import MessageView, ScanReport
from .reporter import result_record

logger = logging.getLogger(__name__)

_ILLEGAL_FILENAME_RE = re.compile(r'[<>:"/\\|?*\x00-\x1f\x7f]')

_FIELDNAMES = [
    "message_id",
    "is_newsletter",
    "method",
    "action",
    "from",
    "subject",
    "date",
    "list_unsubscribe",
    "note",
]


def export_results(report: ScanReport, format: str, output_path: str) -> None:
    """Export scan results to a file.

    Args:
        report: The scan report to export.
        format: Output format, either 'csv' or 'json'.
        output_path: Path to write the output file.
    """
    rows = [result_record(r) for r in report.results]

    if format == "csv":
        with open(output_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=_FIELDNAMES)
            writer.writeheader()
            for row in rows:
                writer.writerow(row)
    elif format == "json":
        with open(output_path, "w") as f:
            json.dump(rows, f, indent=2)
    else:
        raise ValueError(f"Unsupported export format: {format}")

    print(f"Results saved to {output_path}")


def sanitize_filename(subject: str | None) -> str:
    """Turn a subject line into a safe file stem."""
    name = _ILLEGAL_FILENAME_RE.sub("_", subject or "")
    name = name.strip().strip(".")
    name = name[:MAX_FILENAME_LENGTH].rstrip()
    return name or "untitled"


def save_html_body(view: MessageView, output_dir: Path) -> Path | None:
    """Write the decoded HTML body to ``<output_dir>/<subject>.html``.

    Returns the written path, or None when the message has no HTML part.
    Existing files are not overwritten; a numeric suffix is added instead.
    Raises DecodeError when the body cannot be decoded.
    """
    part = locate_html_part(view.body_parts)
    if part is None:
        return None
    body = decode_part(part)

    output_dir.mkdir(parents=True, exist_ok=True)
    stem = sanitize_filename(find_header(view.headers, "Subject"))
    path = output_dir / f"{stem}.html"
    counter = 1
    while path.exists():
        path = output_dir / f"{stem} ({counter}).html"
        counter += 1

    path.write_text(body, encoding="utf-8")
    logger.debug("Archived message %s to %s", view.message_id, path)
    return path


def archive_views(views: list[MessageView], output_dir: Path) -> tuple[list[Path], dict[str, str]]:
    """Archive the HTML body of each view; undecodable bodies are skipped.

    Returns (written paths, error message by message id).
    """
    written: list[Path] = []
    errors: dict[str, str] = {}
    for view in views:
        try:
            path = save_html_body(view, output_dir)
        except DecodeError as exc:
            logger.warning("Message %s: %s", view.message_id, exc)
            errors[view.message_id] = str(exc)
            continue
        if path is not None:
            written.append(path)
    return written, errors
