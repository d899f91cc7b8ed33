"""Batches of file system notifications.

An `Action` is everything the watcher delivered within one debounce window.
Control signals travel in the same batches so they are seen in order with
file changes.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from watchfiles import Change


class Signal(str, Enum):
    """Control signals that stop the watch loop."""

    INTERRUPT = "interrupt"
    TERMINATE = "terminate"


@dataclass(frozen=True)
class Event:
    """A single notification: changed paths and/or control signals."""

    paths: tuple[Path, ...] = ()
    signals: tuple[Signal, ...] = ()
    change: Change | None = None


@dataclass
class Action:
    """A debounced group of events handled together."""

    events: list[Event] = field(default_factory=list)

    @classmethod
    def from_changes(cls, changes: Iterable[tuple[Change, str]]) -> "Action":
        """Create an action from a `watchfiles` change set."""
        return cls([Event(paths=(Path(path),), change=change) for change, path in changes])

    @classmethod
    def from_paths(cls, *paths: str | Path) -> "Action":
        return cls([Event(paths=(Path(path),)) for path in paths])

    @classmethod
    def from_signal(cls, signal: Signal) -> "Action":
        return cls([Event(signals=(signal,))])

    def is_interrupt(self) -> bool:
        return self._has_signal(Signal.INTERRUPT)

    def is_terminate(self) -> bool:
        return self._has_signal(Signal.TERMINATE)

    def unique_paths(self) -> list[Path]:
        """Every affected path once, in first seen order."""
        return list(dict.fromkeys(path for event in self.events for path in event.paths))

    def _has_signal(self, signal: Signal) -> bool:
        return any(signal in event.signals for event in self.events)
