"""Header lookup helpers."""

from __future__ import annotations

from typing import Iterable


def normalize_header_name(name: str) -> str:
    """Return the canonical Title-Case form of a header field name.

    "list-unsubscribe" -> "List-Unsubscribe", "CONTENT-TYPE" -> "Content-Type"
    """
    return "-".join(word.capitalize() for word in name.strip().split("-"))


def find_header(headers: Iterable[tuple[str, str]], name: str) -> str | None:
    """Return the value of the first header called *name*, ignoring case."""
    wanted = name.strip().lower()
    for header_name, value in headers:
        if header_name.strip().lower() == wanted:
            return value
    return None
