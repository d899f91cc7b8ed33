"""Watch loop built on `watchfiles`.

Batches are handled one at a time: the next batch is not dispatched until
the previous one, including any builds it started, has finished. SIGINT and
SIGTERM set a stop event that is checked before every batch, so batches still
queued when a signal arrives are dropped.
"""

import asyncio
import contextlib
import logging
import signal
from collections.abc import Awaitable, Callable
from pathlib import Path

from watchfiles import awatch

from watchso.action import Action, Signal
from watchso.command import terminate_process
from watchso.config import WatchConfig
from watchso.framework import Framework
from watchso.framework.initialize import InitializationReport
from watchso.watch.dispatcher import Outcome, dispatch

logger = logging.getLogger(__name__)

SIGNALS = {
    signal.SIGINT: Signal.INTERRUPT,
    signal.SIGTERM: Signal.TERMINATE,
}


async def resolve_pathset(framework: Framework) -> list[Path]:
    """Absolute watch paths, skipping the ones that do not exist."""
    origin = framework.origin.resolve()
    paths: list[Path] = []
    for path in await framework.pathset():
        absolute = origin / path
        if absolute.exists():
            paths.append(absolute)
        else:
            logger.warning(f"Not watching {path}, it does not exist")
    return paths


def _install_signal_handlers(stop_event: asyncio.Event) -> list[int]:
    loop = asyncio.get_running_loop()
    installed: list[int] = []
    for signum, sig in SIGNALS.items():
        try:
            loop.add_signal_handler(signum, _on_signal, sig, stop_event)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform or outside the main thread
            continue
        installed.append(signum)
    return installed


def _on_signal(sig: Signal, stop_event: asyncio.Event) -> None:
    logger.debug(f"Received {sig.value} signal")
    stop_event.set()


def _remove_signal_handlers(signums: list[int]) -> None:
    loop = asyncio.get_running_loop()
    for signum in signums:
        loop.remove_signal_handler(signum)


async def _produce(
    paths: list[Path],
    framework: Framework,
    config: WatchConfig,
    queue: asyncio.Queue[Action],
    stop_event: asyncio.Event,
) -> None:
    async for changes in awatch(
        *paths,
        watch_filter=framework.watch_filter(),
        debounce=config.debounce_ms,
        stop_event=stop_event,
    ):
        logger.debug(f"Detected {len(changes)} file changes")
        await queue.put(Action.from_changes(changes))


async def run_loop(
    framework: Framework,
    queue: asyncio.Queue[Action],
    producer: asyncio.Task | None = None,
    stop_event: asyncio.Event | None = None,
) -> None:
    """Dispatch actions from `queue` until one asks to exit or `stop_event` is set.

    A set `stop_event` wins over batches still waiting in the queue, it is
    checked before every dispatch. If `producer` finishes first, its exception
    (if any) is raised.
    """
    if stop_event is None:
        stop_event = asyncio.Event()
    stopper = asyncio.ensure_future(stop_event.wait())
    try:
        while not stop_event.is_set():
            getter = asyncio.ensure_future(queue.get())
            waiting = {getter, stopper}
            if producer is not None:
                waiting.add(producer)
            done, _ = await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)

            if getter not in done:
                getter.cancel()
                if producer is not None and producer in done:
                    producer.result()
                return

            if stop_event.is_set():
                return
            if await dispatch(getter.result(), framework) is Outcome.EXIT:
                return
    finally:
        stopper.cancel()


async def shutdown(report: InitializationReport | None, config: WatchConfig) -> None:
    """Stop every child process started for this session."""
    if report is None:
        return
    for process in report.children:
        await terminate_process(process, timeout=config.process_timeout)


async def watch(
    framework: Framework,
    config: WatchConfig | None = None,
    on_ready: Callable[[], Awaitable[None]] | None = None,
) -> InitializationReport:
    """Initialize `framework` and hot reload its programs until interrupted.

    Args:
        framework: Framework of the project to watch.
        config: Watch settings.
        on_ready: Called once after initialization, before watching starts.
    """
    config = config or WatchConfig()
    report: InitializationReport | None = None
    try:
        report = await framework.initialize(config)
        if on_ready is not None:
            await on_ready()

        paths = await resolve_pathset(framework)
        if not paths:
            logger.error("Nothing to watch")
            return report

        queue: asyncio.Queue[Action] = asyncio.Queue()
        stop_event = asyncio.Event()
        signums = _install_signal_handlers(stop_event)
        producer = asyncio.create_task(_produce(paths, framework, config, queue, stop_event))
        logger.info(f"Watching {', '.join(str(p) for p in paths)}")

        try:
            await run_loop(framework, queue, producer, stop_event)
        finally:
            stop_event.set()
            producer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await producer
            _remove_signal_handlers(signums)

        return report
    finally:
        await shutdown(report, config)
