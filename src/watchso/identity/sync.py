"""Keeping declared program ids in sync with program keypairs."""

import asyncio
import logging
from pathlib import Path

from watchso.command import Command
from watchso.constants import LIB_RS, RS, SRC
from watchso.errors import IdentityLookupFailed
from watchso.identity.patterns import RUST_DECLARE_ID, IdentityPattern

logger = logging.getLogger(__name__)


async def get_pubkey_from_keypair_path(keypair_path: Path) -> str:
    """Get the keypair's address by running `solana address -k <keypair>`.

    Raises:
        IdentityLookupFailed: If the command exits with an error.
    """
    output = await Command("solana", ["address", "-k", str(keypair_path)]).output()
    if not output.success:
        raise IdentityLookupFailed(output.stderr)

    return output.stdout.rstrip("\n")


async def update_file_program_id(path: Path, program_id: str, pattern: IdentityPattern) -> bool:
    """Replace the program id declared in `path` if it differs from `program_id`.

    Only the first declaration is considered and only the captured id is
    replaced, the rest of the file is written back byte for byte.

    Returns:
        True if the file was changed.
    """
    path = Path(path)
    content = (await asyncio.to_thread(path.read_bytes)).decode("utf-8")

    found = pattern.search(content)
    if found is None:
        return False

    start, end, declared = found
    if declared == program_id:
        return False

    updated = content[:start] + program_id + content[end:]
    await asyncio.to_thread(path.write_bytes, updated.encode("utf-8"))
    logger.info(f"Updated program id in {path}: {declared} -> {program_id}")
    return True


async def _declares_program_id(path: Path, pattern: IdentityPattern) -> bool:
    content = (await asyncio.to_thread(path.read_bytes)).decode("utf-8", errors="replace")
    return pattern.search(content) is not None


async def find_and_update_program_id(program_path: Path, keypair_path: Path) -> bool:
    """Sync the `declare_id!` of a Rust program with its keypair.

    `src/lib.rs` is checked first. Only if it does not declare an id are the
    remaining source files under `src` searched, stopping at the first
    declaration found.

    Returns:
        True if a file was changed.
    """
    program_id = await get_pubkey_from_keypair_path(keypair_path)

    src_path = Path(program_path) / SRC
    lib_rs = src_path / LIB_RS
    candidates = [lib_rs] if lib_rs.is_file() else []
    candidates.extend(p for p in sorted(src_path.rglob(f"*.{RS}")) if p != lib_rs and p.is_file())

    for path in candidates:
        if await _declares_program_id(path, RUST_DECLARE_ID):
            return await update_file_program_id(path, program_id, RUST_DECLARE_ID)

    logger.debug(f"No declare_id! found under {src_path}")
    return False
