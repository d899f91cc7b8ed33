"""Terminal spinners and progress bars with consistent styles.

Both helpers print a final line when they finish: a green check mark with the
success message, or a red cross with the error message.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, TextColumn
from rich.progress import Progress as ProgressBar

from watchso.command import CommandOutput
from watchso.constants import CHECKMARK, CROSS

logger = logging.getLogger(__name__)

console = Console()

T = TypeVar("T")
Item = TypeVar("Item")


@dataclass
class StageResult:
    """Outcome of a progress stage."""

    name: str
    total: int = 0
    failures: list[tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def _failure_reason(result: Any) -> str | None:
    """Return why a callback result counts as a failure, or None."""
    if isinstance(result, CommandOutput) and not result.success:
        detail = result.stderr.strip().splitlines()
        suffix = f": {detail[-1]}" if detail else ""
        return f"exit code {result.returncode}{suffix}"
    if result is False:
        return "failed"
    return None


class Progress:
    """Reports the status of a long running step to the user."""

    def __init__(
        self,
        message: str,
        success_message: str | None = None,
        error_message: str | None = None,
        console: Console = console,
    ):
        self.message = message
        self.success_message = success_message or message
        self.error_message = error_message or message
        self.console = console

    def _finish(self, ok: bool, detail: str = "") -> None:
        if ok:
            self.console.print(f"[green]{CHECKMARK} {escape(self.success_message)}[/green]")
        else:
            suffix = f" [dim]({escape(detail)})[/dim]" if detail else ""
            self.console.print(f"[red]{CROSS} {escape(self.error_message)}[/red]{suffix}")

    async def spinner_with(self, cb: Callable[[], Awaitable[T]]) -> T:
        """Show a spinner while awaiting `cb`.

        Exceptions raised by `cb` are reported and re-raised.
        """
        with self.console.status(escape(self.message), spinner="dots"):
            try:
                result = await cb()
            except Exception as e:
                self._finish(False, str(e))
                raise

        reason = _failure_reason(result)
        self._finish(reason is None, reason or "")
        return result

    async def progress_with(
        self,
        items: Iterable[Item],
        cb: Callable[[Item], Awaitable[Any]],
    ) -> StageResult:
        """Run `cb` on every item with a progress bar.

        Every item is attempted. An item fails if `cb` raises, returns False
        or returns an unsuccessful `CommandOutput`.
        """
        items = list(items)
        result = StageResult(name=self.message, total=len(items))

        with ProgressBar(
            MofNCompleteColumn(),
            BarColumn(),
            TextColumn("{task.description}"),
            console=self.console,
            transient=True,
        ) as bar:
            task = bar.add_task(escape(self.message), total=len(items))
            for item in items:
                try:
                    reason = _failure_reason(await cb(item))
                except Exception as e:
                    logger.debug(f"{self.message} failed for {item}", exc_info=True)
                    reason = str(e)

                if reason is not None:
                    logger.error(f"{item}: {reason}")
                    result.failures.append((str(item), reason))
                bar.advance(task)

        detail = f"{len(result.failures)}/{result.total} failed" if result.failures else ""
        self._finish(result.ok, detail)
        return result
