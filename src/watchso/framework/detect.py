"""Choosing the framework for a project directory."""

import asyncio
import logging
from pathlib import Path

from watchso.constants import ANCHOR_TOML, CARGO_TOML, PROGRAMS_PY
from watchso.errors import InvalidProjectDirectory
from watchso.framework.anchor import Anchor
from watchso.framework.base import Framework
from watchso.framework.native import Native
from watchso.framework.seahorse import Seahorse

logger = logging.getLogger(__name__)

# Framework registry
FRAMEWORKS: dict[str, type[Framework]] = {
    Native.name: Native,
    Anchor.name: Anchor,
    Seahorse.name: Seahorse,
}

# Marker entry that identifies each framework, checked in order
DETECTION_ORDER: list[tuple[str, type[Framework]]] = [
    (PROGRAMS_PY, Seahorse),
    (ANCHOR_TOML, Anchor),
    (CARGO_TOML, Native),
]


def get_framework(name: str, origin: str | Path) -> Framework:
    """Get a framework instance by name.

    Raises:
        ValueError: If the framework is not registered.
    """
    if name not in FRAMEWORKS:
        raise ValueError(f"Unknown framework: {name}")

    return FRAMEWORKS[name](origin)


async def get_framework_from_path(origin: str | Path) -> Framework:
    """Detect the framework of the project at `origin`.

    Raises:
        InvalidProjectDirectory: If `origin` is not a Solana program directory.
    """
    origin = Path(origin)
    try:
        entries = await asyncio.to_thread(lambda: {entry.name for entry in origin.iterdir()})
    except OSError as e:
        raise InvalidProjectDirectory(origin) from e

    for marker, framework_cls in DETECTION_ORDER:
        if marker in entries:
            logger.debug(f"Found {marker}, using {framework_cls.name}")
            return framework_cls(origin)

    raise InvalidProjectDirectory(origin)
