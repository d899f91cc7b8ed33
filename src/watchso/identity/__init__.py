"""Program id declarations and their keypairs."""

from watchso.identity.patterns import RUST_DECLARE_ID, SEAHORSE_DECLARE_ID, IdentityPattern
from watchso.identity.sync import (
    find_and_update_program_id,
    get_pubkey_from_keypair_path,
    update_file_program_id,
)

__all__ = [
    "IdentityPattern",
    "RUST_DECLARE_ID",
    "SEAHORSE_DECLARE_ID",
    "find_and_update_program_id",
    "get_pubkey_from_keypair_path",
    "update_file_program_id",
]
