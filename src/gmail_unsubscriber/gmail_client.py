"""Gmail API client functions for fetching and managing messages."""

from __future__ import annotations

import logging
from typing import Callable

import httplib2
from googleapiclient.errors import HttpError
from googleapiclient.http import BatchHttpRequest
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from .body import flatten_parts
from .constants import BATCH_SIZE, PAGE_SIZE, TRASH_BATCH_SIZE
from .headers import normalize_header_name
from .models import MessageView

logger = logging.getLogger(__name__)


def _is_retryable_http_error(exc: BaseException) -> bool:
    return isinstance(exc, HttpError) and exc.resp.status in (429, 500, 503)


def message_view_from_gmail(response: dict) -> MessageView:
    """Project a full-format Gmail message resource into a MessageView."""
    payload = response.get("payload", {})
    headers = tuple(
        (normalize_header_name(h.get("name", "")), h.get("value", ""))
        for h in payload.get("headers", [])
    )
    return MessageView(
        message_id=response.get("id", ""),
        headers=headers,
        body_parts=flatten_parts(payload),
        label_ids=tuple(response.get("labelIds", [])),
    )


def list_message_ids(
    service,
    query: str | None = None,
    max_results: int | None = None,
) -> list[str]:
    """List all message IDs matching the query, handling pagination."""
    ids: list[str] = []
    page_token: str | None = None

    while True:
        kwargs: dict = {"userId": "me", "maxResults": PAGE_SIZE, "fields": "messages/id,nextPageToken"}
        if query:
            kwargs["q"] = query
        if page_token:
            kwargs["pageToken"] = page_token

        resp = service.users().messages().list(**kwargs).execute()
        for msg in resp.get("messages", []):
            ids.append(msg["id"])
            if max_results and len(ids) >= max_results:
                return ids[:max_results]

        page_token = resp.get("nextPageToken")
        if not page_token:
            break

    logger.debug("Listed %d message ids (query=%r)", len(ids), query)
    return ids


@retry(
    retry=retry_if_exception(_is_retryable_http_error),
    wait=wait_exponential(multiplier=1, min=1, max=60),
    stop=stop_after_attempt(5),
    reraise=True,
)
def _execute_batch(batch: BatchHttpRequest) -> None:
    batch.execute()


def _fetch_in_batches(
    service,
    message_ids: list[str],
    make_request: Callable[[str], object],
    callback: Callable[[int, int], None] | None = None,
) -> tuple[dict[str, dict], dict[str, str]]:
    """Run one request per id, BATCH_SIZE at a time.

    Each batch is executed to completion before the next one is built.
    Returns (responses by id, error message by id).
    """
    responses: dict[str, dict] = {}
    errors: dict[str, str] = {}
    total_batches = (len(message_ids) + BATCH_SIZE - 1) // BATCH_SIZE

    for batch_num in range(total_batches):
        start = batch_num * BATCH_SIZE
        end = min(start + BATCH_SIZE, len(message_ids))
        chunk = message_ids[start:end]

        batch = service.new_batch_http_request()

        def _make_callback(msg_id: str):
            def _cb(request_id, response, exception):
                if exception is not None:
                    logger.warning("Failed to fetch message %s: %s", msg_id, exception)
                    errors[msg_id] = str(exception)
                    return
                responses[msg_id] = response

            return _cb

        for msg_id in chunk:
            batch.add(make_request(msg_id), callback=_make_callback(msg_id))

        try:
            _execute_batch(batch)
        except (HttpError, httplib2.HttpLib2Error, OSError) as exc:
            logger.error("Batch %d/%d failed: %s", batch_num + 1, total_batches, exc)
            for msg_id in chunk:
                if msg_id not in responses:
                    errors.setdefault(msg_id, str(exc))

        if callback:
            callback(batch_num + 1, total_batches)

    return responses, errors


def fetch_messages(
    service,
    message_ids: list[str],
    callback: Callable[[int, int], None] | None = None,
) -> tuple[list[MessageView], dict[str, str]]:
    """Fetch full messages and project them into MessageViews.

    Results keep the order of *message_ids*. Messages the API could not
    return are reported in the second element instead of raising.
    """
    messages = service.users().messages()
    responses, errors = _fetch_in_batches(
        service,
        message_ids,
        lambda msg_id: messages.get(userId="me", id=msg_id, format="full"),
        callback=callback,
    )
    views = [message_view_from_gmail(responses[i]) for i in message_ids if i in responses]
    return views, errors


def fetch_labels(
    service,
    message_ids: list[str],
    callback: Callable[[int, int], None] | None = None,
) -> tuple[dict[str, list[str]], dict[str, str]]:
    """Fetch the label ids of each message (minimal format).

    Returns (labels by id, error message by id).
    """
    messages = service.users().messages()
    responses, errors = _fetch_in_batches(
        service,
        message_ids,
        lambda msg_id: messages.get(userId="me", id=msg_id, format="minimal"),
        callback=callback,
    )
    return {msg_id: resp.get("labelIds", []) for msg_id, resp in responses.items()}, errors


@retry(
    retry=retry_if_exception(_is_retryable_http_error),
    wait=wait_exponential(multiplier=1, min=1, max=60),
    stop=stop_after_attempt(5),
    reraise=True,
)
def _execute_batch_modify(service, msg_ids: list[str]) -> None:
    service.users().messages().batchModify(
        userId="me",
        body={
            "ids": msg_ids,
            "addLabelIds": ["TRASH"],
            "removeLabelIds": ["INBOX"],
        },
    ).execute()


def trash_messages(
    service,
    message_ids: list[str],
    callback: Callable[[int, int], None] | None = None,
) -> int:
    """Move messages to trash in batches using batchModify."""
    total_batches = max(1, (len(message_ids) + TRASH_BATCH_SIZE - 1) // TRASH_BATCH_SIZE)
    trashed = 0

    for batch_num in range(total_batches):
        start = batch_num * TRASH_BATCH_SIZE
        end = min(start + TRASH_BATCH_SIZE, len(message_ids))
        chunk = message_ids[start:end]
        if not chunk:
            break

        _execute_batch_modify(service, chunk)
        trashed += len(chunk)
        logger.info("Trashed %d messages (batch %d/%d)", len(chunk), batch_num + 1, total_batches)

        if callback:
            callback(batch_num + 1, total_batches)

    return trashed
