"""File system conventions shared across frameworks."""

from typing import Final

# File names
CARGO_TOML: Final = "Cargo.toml"
ANCHOR_TOML: Final = "Anchor.toml"
LIB_RS: Final = "lib.rs"

# Directory names
SRC: Final = "src"
TARGET: Final = "target"
DEPLOY: Final = "deploy"
PROGRAMS_PY: Final = "programs_py"
TEST_LEDGER: Final = "test-ledger"
NODE_MODULES: Final = "node_modules"

# Extensions (without the leading dot)
RS: Final = "rs"
TOML: Final = "toml"
SO: Final = "so"
JSON: Final = "json"
PY: Final = "py"

# Suffixes build tools use for deploy outputs
KEYPAIR_SUFFIX: Final = "-keypair.json"
ELF_SUFFIX: Final = ".so"

# Directories never watched, wherever they appear
IGNORED_DIRS: Final = frozenset({TARGET, TEST_LEDGER, NODE_MODULES})

CHECKMARK: Final = "✔"
CROSS: Final = "✖"
