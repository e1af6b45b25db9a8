"""Newsletter detection and unsubscribe extraction.

Detection runs an ordered chain of strategies over a MessageView. The first
strategy that returns a result wins; later ones are not consulted.

1. List-Unsubscribe header: its mere presence marks the message as a
   newsletter. A web URL is preferred over a mailto target.
2. Body links: anchors in the HTML body whose href or visible text mention
   unsubscribing.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable
from urllib.parse import parse_qs

from bs4 import BeautifulSoup

from .body import decode_part, locate_html_part
from .constants import (
    HEADER_MAILTO_RE,
    HEADER_URL_RE,
    LIST_UNSUBSCRIBE_HEADER,
    UNSUBSCRIBE_KEYWORD_RE,
    WEB_URL_PREFIXES,
)
from .errors import DecodeError, MalformedHeaderError
from .headers import find_header
from .models import (
    DetectionMethod,
    MailtoUnsubscribe,
    MessageView,
    UnsubscribeResult,
    WebUnsubscribe,
)

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s")


@dataclass(frozen=True)
class Anchor:
    href: str
    text: str


def _strip_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub("", value)


def _base_result(view: MessageView, **kwargs) -> UnsubscribeResult:
    return UnsubscribeResult(
        message_id=view.message_id,
        subject=find_header(view.headers, "Subject"),
        sender=find_header(view.headers, "From"),
        date=find_header(view.headers, "Date"),
        **kwargs,
    )


def parse_mailto(target: str) -> MailtoUnsubscribe:
    """Split "addr@example.com?subject=unsubscribe" into address and subject."""
    address, _, query = target.strip().partition("?")
    subject = None
    if query:
        values = parse_qs(query).get("subject")
        if values:
            subject = values[0]
    return MailtoUnsubscribe(address=address, subject=subject)


def detect_from_header(view: MessageView) -> UnsubscribeResult | None:
    value = find_header(view.headers, LIST_UNSUBSCRIBE_HEADER)
    if not value:
        return None

    url_match = HEADER_URL_RE.search(value)
    if url_match:
        action = WebUnsubscribe(url=url_match.group(1).strip())
        return _base_result(
            view, is_newsletter=True, method=DetectionMethod.HEADER, action=action, raw_header=value
        )

    mailto_match = HEADER_MAILTO_RE.search(value)
    if mailto_match:
        action = parse_mailto(mailto_match.group(1))
        return _base_result(
            view, is_newsletter=True, method=DetectionMethod.HEADER, action=action, raw_header=value
        )

    # The header alone is enough to call it a newsletter; body links are not consulted.
    error = MalformedHeaderError(value)
    logger.warning("Message %s: %s", view.message_id, error)
    return _base_result(
        view, is_newsletter=True, method=DetectionMethod.HEADER, raw_header=value, note=str(error)
    )


def extract_anchors(html: str) -> list[Anchor]:
    """Return web anchors in document order, whitespace stripped from href and text.

    Stripping collapses link text and URLs that the sender wrapped across
    lines ("Opt\\n out" -> "Optout"). Adjacent words lose their separator.
    """
    soup = BeautifulSoup(html, "html.parser")
    anchors: list[Anchor] = []
    for tag in soup.find_all("a", href=True):
        href = tag.get("href")
        if not isinstance(href, str):
            continue
        href = _strip_whitespace(href)
        if not href.lower().startswith(WEB_URL_PREFIXES):
            continue
        anchors.append(Anchor(href=href, text=_strip_whitespace(tag.get_text())))
    return anchors


def find_unsubscribe_anchor(anchors: list[Anchor]) -> Anchor | None:
    """Return the first anchor whose href or text looks like an unsubscribe link."""
    for anchor in anchors:
        if UNSUBSCRIBE_KEYWORD_RE.search(anchor.href) or UNSUBSCRIBE_KEYWORD_RE.search(anchor.text):
            return anchor
    return None


def detect_from_body_links(view: MessageView) -> UnsubscribeResult | None:
    part = locate_html_part(view.body_parts)
    if part is None:
        logger.debug("Message %s: no text/html part", view.message_id)
        return None

    anchor = find_unsubscribe_anchor(extract_anchors(decode_part(part)))
    if anchor is None:
        return None
    return _base_result(
        view,
        is_newsletter=True,
        method=DetectionMethod.BODY_LINK,
        action=WebUnsubscribe(url=anchor.href),
    )


Strategy = Callable[[MessageView], UnsubscribeResult | None]

STRATEGIES: tuple[Strategy, ...] = (detect_from_header, detect_from_body_links)


def detect_newsletter(
    view: MessageView,
    strategies: tuple[Strategy, ...] = STRATEGIES,
) -> UnsubscribeResult:
    """Classify a message, returning exactly one result.

    A body that cannot be decoded yields a NONE result with a diagnostic
    note rather than an exception.
    """
    for strategy in strategies:
        try:
            result = strategy(view)
        except DecodeError as exc:
            logger.warning("Message %s: %s", view.message_id, exc)
            return _base_result(
                view, is_newsletter=False, method=DetectionMethod.NONE, note=str(exc)
            )
        if result is not None:
            return result

    return _base_result(view, is_newsletter=False, method=DetectionMethod.NONE)
