"""Solana program frameworks.

- Native: Cargo projects built with `cargo build-sbf`/`cargo build-bpf`
- Anchor: projects with an `Anchor.toml`
- Seahorse: Python programs in `programs_py`
"""

from watchso.framework.anchor import Anchor
from watchso.framework.base import Framework
from watchso.framework.detect import FRAMEWORKS, get_framework, get_framework_from_path
from watchso.framework.initialize import InitializationReport, initialize_framework
from watchso.framework.native import Native
from watchso.framework.seahorse import Seahorse
from watchso.framework.toolchain import ChangeFilter

__all__ = [
    "Framework",
    "Native",
    "Anchor",
    "Seahorse",
    "FRAMEWORKS",
    "get_framework",
    "get_framework_from_path",
    "InitializationReport",
    "initialize_framework",
    "ChangeFilter",
]
