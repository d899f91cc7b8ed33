"""Helpers shared by framework implementations."""

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from watchfiles import Change, DefaultFilter

from watchso.command import Command
from watchso.constants import DEPLOY, IGNORED_DIRS, TARGET
from watchso.errors import CommandError, ProgramNotFound, ToolNotFound

logger = logging.getLogger(__name__)

BUILD_SBF = "cargo build-sbf"
BUILD_BPF = "cargo build-bpf"
TEST_VALIDATOR = "solana-test-validator"


async def require_tool(tool: str) -> None:
    """Raise `ToolNotFound` unless `tool --version` succeeds."""
    if not await Command.exists(tool):
        raise ToolNotFound(tool)


async def get_bpf_or_sbf() -> str:
    """Get the Solana build command.

    Checks for `cargo build-sbf` and `cargo build-bpf` in order.

    Raises:
        ToolNotFound: If neither is installed.
    """
    for build_cmd in (BUILD_SBF, BUILD_BPF):
        if await Command.exists(build_cmd):
            logger.debug(f"Using `{build_cmd}`")
            return build_cmd

    raise ToolNotFound("solana")


async def start_test_validator(origin: Path, wait: float = 2.0) -> asyncio.subprocess.Process:
    """Start `solana-test-validator` in the background.

    Has no effect if a validator is already running, the new process exits on
    its own. The validator has no readiness signal so this only sleeps for
    `wait` seconds and does not confirm that it started.
    """
    process = await Command.parse(TEST_VALIDATOR).current_dir(origin).spawn()
    await asyncio.sleep(wait)
    if process.returncode is not None:
        logger.debug(f"{TEST_VALIDATOR} exited with code {process.returncode}")
    return process


async def locate_program_path(path: Path) -> Path:
    """Get the crate root owning `path` with `cargo locate-project`.

    Raises:
        ProgramNotFound: If `path` is not inside a crate.
    """
    command = Command.parse("cargo locate-project --message-format plain").current_dir(
        Path(path).parent
    )
    try:
        output = await command.output()
    except CommandError as e:
        raise ProgramNotFound(path) from e

    if not output.success:
        raise ProgramNotFound(path)

    return Path(output.stdout.rstrip("\n")).parent


class ChangeFilter(DefaultFilter):
    """Accepts changes to files with the given extensions.

    Build output, ledger and dependency directories are always ignored. The
    project's own `target/deploy` is the exception, it holds the keypairs and
    ELFs that drive deploys.
    """

    def __init__(self, origin: Path, extensions: Iterable[str]):
        super().__init__()
        self.origin = Path(origin).resolve()
        self.extensions = frozenset(extensions)

    def __call__(self, change: Change, path: str) -> bool:
        p = Path(path)
        if p.suffix.lstrip(".") not in self.extensions:
            return False
        if self.is_ignored(p):
            return False
        return super().__call__(change, path)

    def is_ignored(self, path: Path) -> bool:
        try:
            parts = path.relative_to(self.origin).parts[:-1]
        except ValueError:
            parts = path.parts[:-1]

        if parts[:2] == (TARGET, DEPLOY):
            parts = parts[2:]
        return any(part in IGNORED_DIRS for part in parts)
