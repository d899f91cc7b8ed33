"""Top level handling of a batch of changes."""

import logging
from enum import Enum

from rich.console import Console
from rich.markup import escape

from watchso.action import Action
from watchso.framework import Framework
from watchso.progress import console as default_console

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """What the watch loop should do after a batch."""

    CONTINUE = "continue"
    EXIT = "exit"


async def dispatch(
    action: Action,
    framework: Framework,
    console: Console = default_console,
) -> Outcome:
    """Handle one batch.

    Interrupt and terminate signals take precedence over every path in the
    batch. Errors are reported and never stop the watch loop.
    """
    if action.is_interrupt() or action.is_terminate():
        logger.debug("Received stop signal")
        return Outcome.EXIT

    try:
        await framework.on_action(action)
    except Exception as err:
        logger.debug("Failed to handle changes", exc_info=True)
        console.print(f"[bold red]\\[ERR][/bold red] {escape(str(err))}")

    return Outcome.CONTINUE
