"""Native Solana programs built with the Cargo SBF/BPF toolchain."""

from pathlib import Path

from watchso.command import Command
from watchso.framework.base import Framework
from watchso.framework.toolchain import BUILD_SBF, get_bpf_or_sbf
from watchso.project import get_program_name_path_map
from watchso.sync import LockedValue


class Native(Framework):
    """Plain Cargo project or workspace."""

    name = "native"

    def __init__(self, origin: str | Path):
        super().__init__(origin)
        # Either `cargo build-sbf` or `cargo build-bpf`, picked by check_toolset
        self.build_cmd: LockedValue[str] = LockedValue(BUILD_SBF)

    async def check_toolset(self) -> None:
        await self.build_cmd.set(await get_bpf_or_sbf())

    async def map_program_names(self) -> None:
        for name, path in (await get_program_name_path_map(self.origin)).items():
            await self.project_map.set_program_path(name, path)

    async def build(self, program_path: Path) -> Command:
        return Command.parse(await self.build_cmd.get()).current_dir(program_path)

    async def deploy(self, elf_path: Path) -> Command:
        return Command("solana", ["program", "deploy", str(elf_path)])
