"""
Progress notifications for the presentation layer.

The transaction only emits events; how they are shown (console, toast,
nothing) is up to the sink the caller passes in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol, runtime_checkable

from rich.console import Console

Phase = Literal[
    "resolving_ref",
    "processing",
    "creating_tree",
    "creating_commit",
    "updating_ref",
    "succeeded",
    "failed",
]

STAGE_PHASES: tuple[Phase, ...] = (
    "resolving_ref",
    "processing",
    "creating_tree",
    "creating_commit",
    "updating_ref",
)

_PHASE_STYLES: dict[str, str] = {
    "succeeded": "bold green",
    "failed": "bold red",
}


@dataclass(frozen=True)
class ProgressEvent:
    """A single human-readable phase notification."""

    phase: Phase
    message: str
    slug: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.phase in ("succeeded", "failed")


@runtime_checkable
class ProgressSink(Protocol):
    """Receives phase notifications from a batch delete."""

    def notify(self, event: ProgressEvent) -> None:
        ...


class NullProgress:
    """Discard all notifications."""

    def notify(self, event: ProgressEvent) -> None:
        return None


class ConsoleProgress:
    """Print notifications to a rich console (stderr by default)."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)

    def notify(self, event: ProgressEvent) -> None:
        style = _PHASE_STYLES.get(event.phase, "dim")
        self.console.print(event.message, style=style)
