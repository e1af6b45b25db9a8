"""Logging setup - routes records through the shared rich console."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from .display import console


def configure_logging(verbose: bool = False) -> None:
    """Install a RichHandler on the root logger.

    Normal runs only show warnings; --verbose shows per-message records.
    """
    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        handlers=[handler],
        force=True,
    )
