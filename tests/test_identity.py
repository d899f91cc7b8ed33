"""Tests for program id synchronization."""

from pathlib import Path

import pytest

from watchso.errors import IdentityLookupFailed
from watchso.identity import (
    RUST_DECLARE_ID,
    SEAHORSE_DECLARE_ID,
    find_and_update_program_id,
    get_pubkey_from_keypair_path,
    update_file_program_id,
)

OLD_ID = "11111111111111111111111111111111"
NEW_ID = "Fg6PaFpoGXkYsidMpWTK6W2BeZ7FEfcYkg476zPFsLnS"


class TestPatterns:
    """Tests for the declaration patterns."""

    @pytest.mark.parametrize(
        "line",
        [
            f'declare_id!("{OLD_ID}");',
            f'solana_program::declare_id!("{OLD_ID}");',
            f'anchor_lang::prelude::declare_id!("{OLD_ID}");',
        ],
    )
    def test_rust_declarations(self, line: str):
        """Plain and path qualified macros are found."""
        content = f"use foo;\n{line}\n"
        start, end, program_id = RUST_DECLARE_ID.search(content)
        assert program_id == OLD_ID
        assert content[start:end] == OLD_ID

    def test_rust_declaration_must_start_a_line(self):
        """Commented or indented declarations are ignored."""
        content = f'// declare_id!("{OLD_ID}");\n    declare_id!("{OLD_ID}");\n'
        assert RUST_DECLARE_ID.search(content) is None

    @pytest.mark.parametrize("quote", ["'", '"'])
    def test_seahorse_declarations(self, quote: str):
        """Both quote styles are found."""
        content = f"from seahorse.prelude import *\n\ndeclare_id({quote}{OLD_ID}{quote})\n"
        assert SEAHORSE_DECLARE_ID.search(content)[2] == OLD_ID


class TestUpdateFileProgramId:
    """Tests for patching a single file."""

    async def test_updates_only_the_id(self, tmp_path: Path):
        """Everything but the captured id is byte for byte identical."""
        path = tmp_path / "lib.rs"
        before = f'use x;\r\n\r\ndeclare_id!("{OLD_ID}");\r\n// ünïcode\r\n'.encode()
        path.write_bytes(before)

        assert await update_file_program_id(path, NEW_ID, RUST_DECLARE_ID)
        assert path.read_bytes() == before.replace(OLD_ID.encode(), NEW_ID.encode())

    async def test_is_idempotent(self, tmp_path: Path):
        """A second update with the same id changes nothing."""
        path = tmp_path / "lib.rs"
        path.write_text(f'declare_id!("{OLD_ID}");\n')

        assert await update_file_program_id(path, NEW_ID, RUST_DECLARE_ID)
        after_first = path.read_bytes()

        assert not await update_file_program_id(path, NEW_ID, RUST_DECLARE_ID)
        assert path.read_bytes() == after_first

    async def test_only_first_declaration(self, tmp_path: Path):
        """Later declarations are left alone."""
        path = tmp_path / "lib.rs"
        path.write_text(f'declare_id!("{OLD_ID}");\ndeclare_id!("{OLD_ID}");\n')

        assert await update_file_program_id(path, NEW_ID, RUST_DECLARE_ID)
        assert path.read_text() == f'declare_id!("{NEW_ID}");\ndeclare_id!("{OLD_ID}");\n'

    async def test_no_declaration(self, tmp_path: Path):
        """Files without a declaration are not touched."""
        path = tmp_path / "processor.rs"
        path.write_text("pub fn process() {}\n")
        mtime = path.stat().st_mtime_ns

        assert not await update_file_program_id(path, NEW_ID, RUST_DECLARE_ID)
        assert path.stat().st_mtime_ns == mtime

    async def test_seahorse_pattern(self, tmp_path: Path):
        """The Seahorse pattern keeps the original quotes."""
        path = tmp_path / "flipper.py"
        path.write_text(f"declare_id('{OLD_ID}')\n")

        assert await update_file_program_id(path, NEW_ID, SEAHORSE_DECLARE_ID)
        assert path.read_text() == f"declare_id('{NEW_ID}')\n"


class TestKeypairLookup:
    """Tests for deriving the program id from a keypair."""

    async def test_runs_solana_address(self, toolchain, tmp_path: Path):
        """`solana address -k <keypair>` stdout is the program id."""
        keypair = tmp_path / "counter-keypair.json"
        toolchain.respond("solana address -k", stdout=f"{NEW_ID}\n")

        assert await get_pubkey_from_keypair_path(keypair) == NEW_ID
        assert toolchain.lines() == [f"solana address -k {keypair}"]

    async def test_failure_raises(self, toolchain, tmp_path: Path):
        """A non-zero exit raises IdentityLookupFailed with stderr."""
        toolchain.respond("solana address", returncode=1, stderr="invalid keypair\n")

        with pytest.raises(IdentityLookupFailed) as exc_info:
            await get_pubkey_from_keypair_path(tmp_path / "bad-keypair.json")

        assert "invalid keypair" in str(exc_info.value)


class TestFindAndUpdate:
    """Tests for locating the declaration in a Rust program."""

    async def test_lib_rs_first(self, toolchain, native_project):
        """lib.rs is updated when it declares the id."""
        toolchain.respond("solana address", stdout=NEW_ID)
        other = native_project["root"] / "src" / "id.rs"
        other.write_text(f'declare_id!("{OLD_ID}");\n')

        changed = await find_and_update_program_id(
            native_project["root"], native_project["deploy"] / "hello_world-keypair.json"
        )

        assert changed
        assert NEW_ID in native_project["lib_rs"].read_text()
        assert OLD_ID in other.read_text()

    async def test_in_sync_lib_rs_stops_the_search(self, toolchain, native_project):
        """An up to date lib.rs is not a reason to patch other files."""
        toolchain.respond("solana address", stdout=OLD_ID)
        other = native_project["root"] / "src" / "id.rs"
        other.write_text('declare_id!("Other1111111111111111111111111111");\n')

        changed = await find_and_update_program_id(
            native_project["root"], native_project["deploy"] / "hello_world-keypair.json"
        )

        assert not changed
        assert "Other1111111111111111111111111111" in other.read_text()

    async def test_falls_back_to_other_sources(self, toolchain, native_project):
        """Without a declaration in lib.rs the other sources are searched."""
        toolchain.respond("solana address", stdout=NEW_ID)
        native_project["lib_rs"].write_text("pub mod id;\n")
        nested = native_project["root"] / "src" / "state" / "id.rs"
        nested.parent.mkdir()
        nested.write_text(f'declare_id!("{OLD_ID}");\n')

        assert await find_and_update_program_id(
            native_project["root"], native_project["deploy"] / "hello_world-keypair.json"
        )
        assert nested.read_text() == f'declare_id!("{NEW_ID}");\n'

    async def test_no_declaration_anywhere(self, toolchain, native_project):
        """Nothing changes when no file declares an id."""
        toolchain.respond("solana address", stdout=NEW_ID)
        native_project["lib_rs"].write_text("pub fn f() {}\n")

        assert not await find_and_update_program_id(
            native_project["root"], native_project["deploy"] / "hello_world-keypair.json"
        )
