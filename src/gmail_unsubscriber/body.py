"""Locating and decoding MIME body parts."""

from __future__ import annotations

import base64
import binascii
from typing import Iterable

from .errors import DecodeError
from .models import BodyPart

HTML_MIME_TYPE = "text/html"


def _base_mime_type(mime_type: str) -> str:
    return mime_type.split(";", 1)[0].strip().lower()


def locate_html_part(body_parts: Iterable[BodyPart]) -> BodyPart | None:
    """Return the first text/html part, or None for text-only mail."""
    for part in body_parts:
        if _base_mime_type(part.mime_type) == HTML_MIME_TYPE:
            return part
    return None


def decode_part(part: BodyPart) -> str:
    """Decode a base64 (standard or URL-safe) payload into UTF-8 text.

    Raises DecodeError on malformed base64 or invalid UTF-8 instead of
    returning replacement characters.
    """
    data = "".join(part.data.split())
    data = data.replace("-", "+").replace("_", "/")
    data += "=" * (-len(data) % 4)
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(part.mime_type, f"invalid base64 ({exc})") from exc
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(part.mime_type, f"invalid UTF-8 ({exc.reason})") from exc


def flatten_parts(payload: dict) -> tuple[BodyPart, ...]:
    """Collect the leaf parts of a Gmail payload tree in document order.

    Only parts carrying inline ``body.data`` are returned; attachments
    referenced by ``attachmentId`` are skipped.
    """
    parts: list[BodyPart] = []

    def _walk(node: dict) -> None:
        children = node.get("parts") or []
        data = node.get("body", {}).get("data")
        if data and not children:
            parts.append(BodyPart(mime_type=node.get("mimeType", ""), data=data))
        for child in children:
            _walk(child)

    _walk(payload)
    return tuple(parts)
