"""Running external commands.

Every interaction with the Solana toolchain goes through `Command`:
- `output()` runs to completion and captures stdout/stderr
- `run()` runs to completion with the terminal attached
- `spawn()` starts a background process and returns immediately

A non-zero exit status is reported through the return value. Only failing to
start the process at all raises `CommandError`.
"""

import asyncio
import logging
import shlex
from dataclasses import dataclass, field
from pathlib import Path

from watchso.errors import CommandError

logger = logging.getLogger(__name__)


@dataclass
class CommandOutput:
    """Captured result of a finished command."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


@dataclass
class Command:
    """An external command line with an optional working directory."""

    program: str
    args: list[str] = field(default_factory=list)
    cwd: Path | None = None

    @classmethod
    def parse(cls, line: str) -> "Command":
        """Create a command from a whitespace separated command line."""
        words = line.split()
        if not words:
            raise ValueError("Empty command line")
        return cls(words[0], words[1:])

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def current_dir(self, path: str | Path) -> "Command":
        """Set the working directory of the command."""
        self.cwd = Path(path)
        return self

    def __str__(self) -> str:
        return shlex.join(self.argv)

    async def _start(self, **kwargs) -> asyncio.subprocess.Process:
        logger.debug(f"Running `{self}`" + (f" in {self.cwd}" if self.cwd else ""))
        try:
            return await asyncio.create_subprocess_exec(
                *self.argv,
                cwd=self.cwd,
                **kwargs,
            )
        except OSError as e:
            raise CommandError(str(self), str(e)) from e

    async def output(self) -> CommandOutput:
        """Run the command to completion and capture its output."""
        process = await self._start(
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()

        return CommandOutput(
            returncode=process.returncode or 0,
            stdout=stdout.decode("utf-8", errors="replace") if stdout else "",
            stderr=stderr.decode("utf-8", errors="replace") if stderr else "",
        )

    async def run(self) -> bool:
        """Run the command with inherited stdio.

        Returns:
            True if the command exited successfully.
        """
        process = await self._start()
        returncode = await process.wait()
        if returncode != 0:
            logger.debug(f"`{self}` exited with code {returncode}")
        return returncode == 0

    async def spawn(self) -> asyncio.subprocess.Process:
        """Start the command in the background, discarding its output."""
        return await self._start(
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )

    @classmethod
    async def exists(cls, tool: str) -> bool:
        """Check whether `tool` is installed by running `<tool> --version`."""
        try:
            output = await cls.parse(f"{tool} --version").output()
        except CommandError:
            return False
        return output.success


async def terminate_process(process: asyncio.subprocess.Process, timeout: float = 5.0) -> None:
    """Terminate a child process, killing it if it does not exit in time."""
    if process.returncode is not None:
        return

    try:
        process.terminate()
    except ProcessLookupError:
        return

    try:
        await asyncio.wait_for(process.wait(), timeout=timeout)
    except TimeoutError:
        logger.warning(f"Process {process.pid} did not exit, killing it")
        process.kill()
        await process.wait()
