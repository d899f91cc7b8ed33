"""Cargo manifest models.

Only the keys watchso needs are modelled, everything else is ignored.
"""

import asyncio
from pathlib import Path

import tomli
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from watchso.constants import CARGO_TOML
from watchso.errors import ManifestError


class Package(BaseModel):
    """The `[package]` table."""

    model_config = ConfigDict(extra="ignore")

    name: str


class Workspace(BaseModel):
    """The `[workspace]` table."""

    model_config = ConfigDict(extra="ignore")

    members: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)


class CargoManifest(BaseModel):
    """A parsed `Cargo.toml`."""

    model_config = ConfigDict(extra="ignore")

    package: Package | None = None
    workspace: Workspace | None = None


def parse_cargo_toml(content: str, path: Path) -> CargoManifest:
    """Parse manifest text. `path` is only used for error messages."""
    try:
        return CargoManifest.model_validate(tomli.loads(content))
    except tomli.TOMLDecodeError as e:
        raise ManifestError(path, str(e)) from e
    except ValidationError as e:
        raise ManifestError(path, f"{e.error_count()} invalid field(s)") from e


async def read_cargo_toml(directory: Path) -> CargoManifest:
    """Read and parse the `Cargo.toml` in `directory`."""
    path = Path(directory) / CARGO_TOML
    try:
        content = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except OSError as e:
        raise ManifestError(path, e.strerror or str(e)) from e

    return parse_cargo_toml(content, path)
