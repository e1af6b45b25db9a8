"""Data models for Gmail Unsubscriber."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class BodyPart:
    """A single MIME leaf part."""

    mime_type: str
    data: str  # base64 / base64url transfer-encoded payload


@dataclass(frozen=True)
class MessageView:
    """Read-only projection of one message into what detection needs."""

    message_id: str
    headers: tuple[tuple[str, str], ...] = ()
    body_parts: tuple[BodyPart, ...] = ()
    label_ids: tuple[str, ...] = ()


class DetectionMethod(str, enum.Enum):
    """Which strategy produced the verdict."""

    HEADER = "HEADER"
    BODY_LINK = "BODY_LINK"
    NONE = "NONE"


@dataclass(frozen=True)
class WebUnsubscribe:
    url: str

    def describe(self) -> str:
        return self.url


@dataclass(frozen=True)
class MailtoUnsubscribe:
    address: str
    subject: str | None = None  # from a ?subject= parameter

    def describe(self) -> str:
        return f"mailto:{self.address}"


UnsubscribeAction = WebUnsubscribe | MailtoUnsubscribe


@dataclass(frozen=True)
class UnsubscribeResult:
    """Classification of a single message."""

    message_id: str
    is_newsletter: bool
    method: DetectionMethod
    action: UnsubscribeAction | None = None
    subject: str | None = None
    sender: str | None = None  # Full From header value
    date: str | None = None
    raw_header: str | None = None  # List-Unsubscribe value when the header fired
    note: str | None = None


@dataclass
class ScanReport:
    """Result of a mailbox scan."""

    total_messages: int
    admitted: int = 0
    results: list[UnsubscribeResult] = field(default_factory=list)
    query: str = ""
    scan_date: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def newsletters(self) -> list[UnsubscribeResult]:
        return [r for r in self.results if r.is_newsletter]
