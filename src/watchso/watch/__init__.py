"""Dispatching file system changes to frameworks."""

from watchso.watch.dispatcher import Outcome, dispatch
from watchso.watch.watcher import resolve_pathset, run_loop, watch

__all__ = [
    "Outcome",
    "dispatch",
    "resolve_pathset",
    "run_loop",
    "watch",
]
