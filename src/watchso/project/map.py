"""Mapping of program names to their directories.

Solana build tools name the keypair `<program_name>-keypair.json` and the ELF
`<program_name>.so`, always in snake case. The declared program name may be
kebab case, so `hello-world` and `hello_world` produce the same output files.
Lookups try the literal name first, then the kebab case form, then the snake
case form.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from watchso.constants import ELF_SUFFIX, JSON, KEYPAIR_SUFFIX, SO
from watchso.sync import RWLock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgramName:
    """A program name derived from a build output file name."""

    original: str

    @classmethod
    def from_keypair_path(cls, path: Path) -> "ProgramName | None":
        return cls._from_path(path, KEYPAIR_SUFFIX)

    @classmethod
    def from_elf_path(cls, path: Path) -> "ProgramName | None":
        return cls._from_path(path, ELF_SUFFIX)

    @classmethod
    def from_path(cls, path: Path) -> "ProgramName | None":
        """Derive the name from a keypair or ELF path based on its extension."""
        ext = Path(path).suffix.lstrip(".")
        if ext == JSON:
            return cls.from_keypair_path(path)
        if ext == SO:
            return cls.from_elf_path(path)
        return None

    @classmethod
    def _from_path(cls, path: Path, suffix: str) -> "ProgramName | None":
        name = Path(path).name
        if not name.endswith(suffix) or name == suffix:
            return None
        return cls(name.removesuffix(suffix))

    @property
    def kebab_case(self) -> str:
        return self.original.replace("_", "-")

    @property
    def snake_case(self) -> str:
        return self.original.replace("-", "_")


class ProjectMap:
    """Program name to program path mapping shared by all event handlers.

    Written while mapping program names, read on every event.
    """

    def __init__(self) -> None:
        self._programs: dict[str, Path] = {}
        self._lock = RWLock()

    async def set_program_path(self, name: str, path: str | Path) -> None:
        """Insert or overwrite a program.

        Raises:
            ValueError: If `path` does not exist.
        """
        path = Path(path)
        if not path.exists():
            raise ValueError(f"Program path does not exist: {path}")

        async with self._lock.write():
            self._programs[name] = path
        logger.debug(f"Mapped program {name} -> {path}")

    async def get_program_path(self, path: str | Path) -> Path | None:
        """Get a program's path from its keypair or ELF path."""
        program_name = ProgramName.from_path(Path(path))
        if program_name is None:
            return None

        program_path = await self._get(program_name.original)
        if program_path is None:
            program_path = await self._get(program_name.kebab_case)
        if program_path is None:
            program_path = await self._get(program_name.snake_case)
        return program_path

    async def programs(self) -> dict[str, Path]:
        """Snapshot of all known programs."""
        async with self._lock.read():
            return dict(self._programs)

    async def _get(self, name: str) -> Path | None:
        async with self._lock.read():
            return self._programs.get(name)
