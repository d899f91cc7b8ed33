"""Seahorse programs written in Python and compiled to Anchor."""

import logging
from pathlib import Path

from watchso.action import Action
from watchso.command import Command
from watchso.constants import DEPLOY, JSON, PROGRAMS_PY, PY, SO, TARGET
from watchso.framework.base import Framework
from watchso.framework.toolchain import require_tool
from watchso.identity import (
    SEAHORSE_DECLARE_ID,
    get_pubkey_from_keypair_path,
    update_file_program_id,
)

logger = logging.getLogger(__name__)

SEAHORSE = "seahorse"


def get_program_name_from_path(path: Path) -> str | None:
    """Seahorse names the generated Anchor program after the Python file."""
    path = Path(path)
    if path.suffix != f".{PY}":
        return None
    return path.stem


class Seahorse(Framework):
    """Seahorse project, programs live in `programs_py/*.py`."""

    name = "seahorse"
    extensions = frozenset({PY, SO, JSON})

    async def check_toolset(self) -> None:
        await require_tool(SEAHORSE)

    async def map_program_names(self) -> None:
        for path in sorted((self.origin / PROGRAMS_PY).glob(f"*.{PY}")):
            program_name = get_program_name_from_path(path)
            if program_name is not None:
                await self.project_map.set_program_path(program_name, path)

    async def pathset(self) -> list[Path]:
        return [Path(TARGET) / DEPLOY, Path(PROGRAMS_PY)]

    async def on_action(self, action: Action) -> None:
        for path in action.unique_paths():
            ext = path.suffix.lstrip(".")
            if ext == PY:
                await self._run(await self.build(path))
            elif ext == SO:
                await self._run(await self.deploy(path))
            elif ext == JSON:
                await self.update_program_id(path)

    async def update_program_id(self, keypair_path: Path) -> bool:
        # The mapped path is the program's Python file itself
        program_path = await self.get_program_path(keypair_path)
        if program_path is None:
            logger.debug(f"No program found for {keypair_path}")
            return False

        program_id = await get_pubkey_from_keypair_path(keypair_path)
        return await update_file_program_id(program_path, program_id, SEAHORSE_DECLARE_ID)

    async def build(self, program_path: Path) -> Command:
        program_name = get_program_name_from_path(program_path)
        if program_name is None:
            return Command.parse("seahorse build")
        return Command("seahorse", ["build", "-p", program_name])

    async def deploy(self, elf_path: Path) -> Command:
        program_path = await self.get_program_path(elf_path)
        program_name = get_program_name_from_path(program_path) if program_path else None
        if program_name is None:
            return Command.parse("anchor deploy")
        return Command("anchor", ["deploy", "-p", program_name])
