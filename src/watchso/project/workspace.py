"""Cargo workspace helpers."""

import logging
from pathlib import Path

from watchso.constants import CARGO_TOML, DEPLOY, SRC, TARGET
from watchso.errors import ManifestError
from watchso.project.manifest import read_cargo_toml

logger = logging.getLogger(__name__)


def _glob(origin: Path, pattern: str) -> list[Path]:
    try:
        return list(origin.glob(pattern))
    except (ValueError, NotImplementedError) as e:
        reason = f"invalid workspace glob {pattern!r}: {e}"
        raise ManifestError(origin / CARGO_TOML, reason) from e


def glob_dirs(origin: Path, include: list[str], exclude: list[str]) -> list[Path]:
    """Directories under `origin` matching any `include` glob and no `exclude` glob.

    Raises:
        ManifestError: If a glob is empty or absolute.
    """
    matched: set[Path] = set()
    for pattern in include:
        matched.update(p for p in _glob(origin, pattern) if p.is_dir())

    excluded: set[Path] = set()
    for pattern in exclude:
        excluded.update(_glob(origin, pattern))

    return sorted(matched - excluded)


async def filter_workspace_programs(origin: Path) -> list[Path] | None:
    """Member directories of the workspace at `origin`.

    Returns:
        None if the manifest at `origin` is not a workspace.

    Raises:
        ManifestError: If `origin` has no readable manifest.
    """
    manifest = await read_cargo_toml(origin)
    if manifest.workspace is None:
        return None

    return glob_dirs(origin, manifest.workspace.members, manifest.workspace.exclude)


async def get_watch_pathset(origin: Path) -> list[Path]:
    """Paths to watch, relative to `origin`.

    Always includes `target/deploy`, plus the workspace members or `src` for
    a single crate.
    """
    paths = [Path(TARGET) / DEPLOY]
    members = await filter_workspace_programs(origin)
    if members is None:
        paths.append(Path(SRC))
    else:
        paths.extend(member.relative_to(origin) for member in members)

    return paths


async def get_program_name_path_map(origin: Path) -> dict[str, Path]:
    """Map every package name in the project to its directory."""
    program_paths = await filter_workspace_programs(origin)
    if program_paths is None:
        program_paths = [origin]

    programs: dict[str, Path] = {}
    for program_path in program_paths:
        try:
            manifest = await read_cargo_toml(program_path)
        except ManifestError as e:
            logger.debug(f"Skipping {program_path}: {e}")
            continue

        if manifest.package is not None:
            programs[manifest.package.name] = program_path

    return programs
