"""Framework abstraction.

A framework knows a project layout: which tools it needs, where programs
live, what to watch and which commands build and deploy a program. The
defaults on `Framework` implement the Rust/Cargo conventions shared by the
native and Anchor layouts; variants override only what differs.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from watchso.action import Action
from watchso.command import Command
from watchso.config import WatchConfig
from watchso.constants import JSON, RS, SO, TOML
from watchso.framework.toolchain import ChangeFilter, locate_program_path
from watchso.identity import find_and_update_program_id
from watchso.project import ProjectMap, get_watch_pathset

if TYPE_CHECKING:
    from watchso.framework.initialize import InitializationReport

logger = logging.getLogger(__name__)


class Framework(ABC):
    """A Solana program framework that can be watched."""

    name: ClassVar[str]

    # Extensions that pass the watch filter
    extensions: ClassVar[frozenset[str]] = frozenset({RS, TOML, SO, JSON})

    def __init__(self, origin: str | Path):
        # Root directory of the project, other paths are derived from it
        self.origin = Path(origin)
        self.project_map = ProjectMap()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.origin)!r})"

    @abstractmethod
    async def check_toolset(self) -> None:
        """Check the required tools are installed.

        Raises:
            ToolNotFound: If a tool is missing.
        """
        ...

    @abstractmethod
    async def map_program_names(self) -> None:
        """Cache program names and paths so events don't hit the file system."""
        ...

    @abstractmethod
    async def build(self, program_path: Path) -> Command:
        """Command that builds the program at `program_path`."""
        ...

    @abstractmethod
    async def deploy(self, elf_path: Path) -> Command:
        """Command that deploys the ELF at `elf_path`."""
        ...

    async def initialize(self, config: WatchConfig | None = None) -> "InitializationReport":
        """Run the checks and first build/deploy before watching starts."""
        from watchso.framework.initialize import initialize_framework

        return await initialize_framework(self, config or WatchConfig())

    async def get_program_path(self, path: Path) -> Path | None:
        """Get the program's path from its keypair or ELF path."""
        return await self.project_map.get_program_path(path)

    async def locate_program(self, source_path: Path) -> Path:
        """Get the program's path from one of its source or manifest files."""
        return await locate_program_path(source_path)

    async def update_program_id(self, keypair_path: Path) -> bool:
        """Sync the program's declared id with `keypair_path`.

        Returns:
            True if a source file was changed. Keypairs of unknown programs
            are ignored.
        """
        program_path = await self.get_program_path(keypair_path)
        if program_path is None:
            logger.debug(f"No program found for {keypair_path}")
            return False

        return await find_and_update_program_id(program_path, keypair_path)

    async def pathset(self) -> list[Path]:
        """Paths to watch, relative to the origin."""
        return await get_watch_pathset(self.origin)

    def watch_filter(self) -> ChangeFilter:
        return ChangeFilter(self.origin, self.extensions)

    async def on_action(self, action: Action) -> None:
        """Handle a batch of changes that passed the watch filter.

        Source and manifest changes are collected first so a program is built
        once per batch no matter how many of its files changed.
        """
        program_paths: dict[Path, None] = {}
        for path in action.unique_paths():
            ext = path.suffix.lstrip(".")
            if ext in (RS, TOML):
                program_paths[await self.locate_program(path)] = None
            elif ext == SO:
                await self._run(await self.deploy(path))
            elif ext == JSON:
                await self.update_program_id(path)

        for program_path in program_paths:
            await self._run(await self.build(program_path))

    async def _run(self, command: Command) -> bool:
        ok = await command.run()
        if not ok:
            logger.warning(f"`{command}` failed")
        return ok
