"""
Shared Rich console helpers for the SlideSmith CLIs.
"""

from __future__ import annotations

from functools import lru_cache

from rich.console import Console
from rich.text import Text

# Step statuses of a run and presentation statuses share one palette
STATUS_STYLES = {
    "pending": "dim",
    "draft": "yellow",
    "processing": "bold cyan",
    "completed": "bold green",
    "error": "bold red",
}


@lru_cache(maxsize=1)
def get_console() -> Console:
    """Return a shared stdout console instance."""
    return Console()


@lru_cache(maxsize=1)
def get_err_console() -> Console:
    """Return a shared stderr console instance."""
    return Console(stderr=True)


def status_label(status: str) -> Text:
    """Bracketed status label coloured by :data:`STATUS_STYLES`."""
    text = Text(f"[{status}]")
    text.stylize(STATUS_STYLES.get(status, "white"))
    return text
