"""Shared fixtures for tests."""

from __future__ import annotations

import base64

import pytest

from gmail_unsubscriber.models import BodyPart, MessageView


def b64(text: str) -> str:
    """Encode text the way the Gmail API does (base64url, no padding)."""
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii").rstrip("=")


def make_view(
    message_id: str = "msg_001",
    headers: list[tuple[str, str]] | None = None,
    html: str | None = None,
    text: str | None = None,
    labels: tuple[str, ...] = ("UNREAD", "CATEGORY_PROMOTIONS"),
) -> MessageView:
    parts = []
    if text is not None:
        parts.append(BodyPart(mime_type="text/plain", data=b64(text)))
    if html is not None:
        parts.append(BodyPart(mime_type="text/html", data=b64(html)))
    if headers is None:
        headers = [
            ("From", "Shop <news@shop.example>"),
            ("Subject", "Big sale this weekend"),
            ("Date", "Mon, 15 Jan 2024 10:00:00 +0000"),
        ]
    return MessageView(
        message_id=message_id,
        headers=tuple(headers),
        body_parts=tuple(parts),
        label_ids=labels,
    )


def gmail_message(
    message_id: str,
    headers: dict[str, str],
    html: str | None = None,
    labels: list[str] | None = None,
) -> dict:
    """Build a full-format Gmail message resource."""
    parts = [{"mimeType": "text/plain", "body": {"data": b64("plain text")}}]
    if html is not None:
        parts.append({"mimeType": "text/html", "body": {"data": b64(html)}})
    return {
        "id": message_id,
        "labelIds": labels if labels is not None else ["UNREAD", "CATEGORY_PROMOTIONS"],
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": [{"name": k, "value": v} for k, v in headers.items()],
            "body": {"size": 0},
            "parts": parts,
        },
    }


class _Request:
    def __init__(self, func, kwargs):
        self._func = func
        self.kwargs = kwargs

    def execute(self):
        return self._func(**self.kwargs)


class _Batch:
    def __init__(self, service: "FakeGmailService"):
        self._service = service
        self._requests = []

    def add(self, request, callback):
        self._requests.append((request, callback))

    def execute(self):
        self._service.batches_executed += 1
        for idx, (request, callback) in enumerate(self._requests):
            try:
                response = request.execute()
            except KeyError as exc:
                callback(str(idx), None, Exception(f"not found: {exc}"))
            else:
                callback(str(idx), response, None)


class _Messages:
    def __init__(self, service: "FakeGmailService"):
        self._service = service

    def list(self, **kwargs):
        return _Request(self._service._list, kwargs)

    def get(self, **kwargs):
        return _Request(self._service._get, kwargs)

    def batchModify(self, **kwargs):
        return _Request(self._service._batch_modify, kwargs)


class _Users:
    def __init__(self, service: "FakeGmailService"):
        self._service = service

    def messages(self):
        return _Messages(self._service)


class FakeGmailService:
    """In-memory stand-in for the googleapiclient Gmail resource."""

    def __init__(self, messages: list[dict], page_size: int = 2):
        self.messages = {m["id"]: m for m in messages}
        self.order = [m["id"] for m in messages]
        self.page_size = page_size
        self.missing: set[str] = set()
        self.list_calls: list[dict] = []
        self.trashed: list[str] = []
        self.batches_executed = 0

    def users(self):
        return _Users(self)

    def new_batch_http_request(self):
        return _Batch(self)

    def _list(self, **kwargs):
        self.list_calls.append(kwargs)
        start = int(kwargs.get("pageToken") or 0)
        end = start + self.page_size
        resp = {"messages": [{"id": i} for i in self.order[start:end]]}
        if end < len(self.order):
            resp["nextPageToken"] = str(end)
        return resp

    def _get(self, userId, id, format="full"):
        if id in self.missing:
            raise KeyError(id)
        message = self.messages[id]
        if format == "minimal":
            return {"id": id, "labelIds": message.get("labelIds", [])}
        return message

    def _batch_modify(self, userId, body):
        self.trashed.extend(body["ids"])
        return {}


@pytest.fixture
def header_url_view() -> MessageView:
    return make_view(
        headers=[
            ("From", "Shop <news@shop.example>"),
            ("Subject", "Weekly deals"),
            ("Date", "Mon, 15 Jan 2024 10:00:00 +0000"),
            ("List-Unsubscribe", "<https://x.com/u?id=1>, <mailto:unsub@x.com>"),
        ],
        html='<p>Hi</p><a href="https://x.com/unsubscribe">Unsubscribe</a>',
    )


@pytest.fixture
def body_link_view() -> MessageView:
    return make_view(html='<p>Deals</p><a href="https://x.com/opt-out">Opt out</a>')


@pytest.fixture
def plain_view() -> MessageView:
    return make_view(
        headers=[("From", "Alice <alice@example.com>"), ("Subject", "Lunch?")],
        text="See you at noon. To remove yourself from the list, reply.",
        labels=("UNREAD",),
    )


@pytest.fixture
def fake_service() -> FakeGmailService:
    return FakeGmailService(
        [
            gmail_message(
                "m1",
                {
                    "From": "Shop <news@shop.example>",
                    "Subject": "Weekly deals",
                    "list-unsubscribe": "<https://shop.example/u/1>",
                },
                html="<p>deals</p>",
            ),
            gmail_message(
                "m2",
                {"From": "Blog <hi@blog.example>", "Subject": "New post"},
                html='<a href="https://blog.example/remove?u=2">Stop these emails</a>',
            ),
            gmail_message(
                "m3",
                {"From": "Alice <alice@example.com>", "Subject": "Lunch?"},
                html="<p>noon?</p>",
                labels=["INBOX", "UNREAD"],
            ),
            gmail_message(
                "m4",
                {"From": "Store <promo@store.example>", "Subject": "Flash sale"},
                html='<a href="https://store.example/view">View online</a>',
                labels=["UNREAD", "CATEGORY_PROMOTIONS", "CATEGORY_SOCIAL"],
            ),
        ]
    )
