"""Structured logging of classification results."""

from __future__ import annotations

import logging

from .models import DetectionMethod, UnsubscribeResult

logger = logging.getLogger(__name__)


def result_record(result: UnsubscribeResult) -> dict:
    """Flatten a result into a JSON-friendly dict."""
    return {
        "message_id": result.message_id,
        "is_newsletter": result.is_newsletter,
        "method": result.method.value,
        "action": result.action.describe() if result.action else None,
        "from": result.sender,
        "subject": result.subject,
        "date": result.date,
        "list_unsubscribe": result.raw_header,
        "note": result.note,
    }


def log_result(result: UnsubscribeResult) -> None:
    """Emit one log record per classified message."""
    record = result_record(result)
    if result.note and result.method is DetectionMethod.NONE:
        level = logging.WARNING
    elif result.is_newsletter:
        level = logging.INFO
    else:
        level = logging.DEBUG
    logger.log(
        level,
        "message=%s method=%s action=%s from=%r subject=%r date=%r note=%r",
        record["message_id"],
        record["method"],
        record["action"],
        record["from"],
        record["subject"],
        record["date"],
        record["note"],
        extra={"unsubscribe": record},
    )
