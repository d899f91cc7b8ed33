"""Anchor workspaces."""

from pathlib import Path

from watchso.command import Command
from watchso.framework.base import Framework
from watchso.framework.toolchain import require_tool
from watchso.project import get_program_name_path_map

ANCHOR = "anchor"


class Anchor(Framework):
    """Project managed by the Anchor CLI."""

    name = "anchor"

    async def check_toolset(self) -> None:
        await require_tool(ANCHOR)

    async def map_program_names(self) -> None:
        for name, path in (await get_program_name_path_map(self.origin)).items():
            await self.project_map.set_program_path(name, path)

    async def build(self, program_path: Path) -> Command:
        # Running from the program's directory makes Anchor build only that program
        return Command.parse("anchor build").current_dir(program_path)

    async def deploy(self, elf_path: Path) -> Command:
        # Anchor deploys every program unless told otherwise, and it names
        # programs after their directory rather than their package name.
        program_path = await self.get_program_path(elf_path)
        if program_path is None:
            return Command.parse("anchor deploy")
        return Command("anchor", ["deploy", "-p", program_path.name])
