"""Pytest configuration and fixtures."""

import dataclasses
from pathlib import Path

import pytest

from watchso.command import Command, CommandOutput
from watchso.errors import CommandError


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="run live tests that use the real Solana toolchain",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "live: mark test as requiring the Solana toolchain (deselect with '-m \"not live\"')",
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is specified."""
    if config.getoption("--run-live"):
        return

    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


class FakeProcess:
    """Stand-in for a background `asyncio.subprocess.Process`."""

    pid = 4242

    def __init__(self) -> None:
        self.returncode: int | None = None
        self.terminated = False

    def terminate(self) -> None:
        self.terminated = True
        self.returncode = -15

    def kill(self) -> None:
        self.returncode = -9

    async def wait(self) -> int:
        return self.returncode


class FakeToolchain:
    """Records commands instead of running them.

    Responses are matched by the longest registered prefix of the command
    line. Unmatched commands succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, Command]] = []
        self.responses: dict[str, CommandOutput] = {}
        self.missing: set[str] = set()
        self.spawned: list[FakeProcess] = []

    def respond(self, prefix: str, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.responses[prefix] = CommandOutput(returncode, stdout, stderr)

    def _record(self, mode: str, command: Command) -> CommandOutput:
        self.calls.append((mode, dataclasses.replace(command, args=list(command.args))))
        if command.program in self.missing:
            raise CommandError(str(command), "No such file or directory")

        line = str(command)
        matches = [prefix for prefix in self.responses if line.startswith(prefix)]
        if not matches:
            return CommandOutput(0, "", "")
        return self.responses[max(matches, key=len)]

    def lines(self, mode: str | None = None) -> list[str]:
        return [str(cmd) for m, cmd in self.calls if mode is None or m == mode]

    def commands(self, mode: str | None = None) -> list[Command]:
        return [cmd for m, cmd in self.calls if mode is None or m == mode]


@pytest.fixture
def toolchain(monkeypatch) -> FakeToolchain:
    """Patch `Command` so no external process is started."""
    fake = FakeToolchain()

    async def output(self: Command) -> CommandOutput:
        return fake._record("output", self)

    async def run(self: Command) -> bool:
        return fake._record("run", self).success

    async def spawn(self: Command) -> FakeProcess:
        fake._record("spawn", self)
        process = FakeProcess()
        fake.spawned.append(process)
        return process

    monkeypatch.setattr(Command, "output", output)
    monkeypatch.setattr(Command, "run", run)
    monkeypatch.setattr(Command, "spawn", spawn)
    return fake


DEFAULT_ID = "11111111111111111111111111111111"


def write_crate(path: Path, name: str, program_id: str = DEFAULT_ID) -> Path:
    """Create a minimal program crate at `path`."""
    (path / "src").mkdir(parents=True, exist_ok=True)
    (path / "Cargo.toml").write_text(f'[package]\nname = "{name}"\nversion = "0.1.0"\n')
    (path / "src" / "lib.rs").write_text(
        "use solana_program::entrypoint;\n"
        "\n"
        f'solana_program::declare_id!("{program_id}");\n'
        "\n"
        "entrypoint!(process_instruction);\n"
    )
    return path


@pytest.fixture
def native_project(tmp_path: Path) -> dict:
    """A single crate native project."""
    root = write_crate(tmp_path / "hello", "hello_world")
    deploy = root / "target" / "deploy"
    return {"root": root, "deploy": deploy, "lib_rs": root / "src" / "lib.rs"}


@pytest.fixture
def workspace_project(tmp_path: Path) -> dict:
    """A Cargo workspace with two programs and an excluded crate."""
    root = tmp_path / "workspace"
    root.mkdir()
    (root / "Cargo.toml").write_text(
        "[workspace]\n"
        'members = ["programs/*"]\n'
        'exclude = ["programs/legacy"]\n'
    )
    counter = write_crate(root / "programs" / "counter", "counter")
    hello = write_crate(root / "programs" / "hello-world", "hello-world")
    legacy = write_crate(root / "programs" / "legacy", "legacy")
    return {
        "root": root,
        "counter": counter,
        "hello": hello,
        "legacy": legacy,
        "deploy": root / "target" / "deploy",
    }


@pytest.fixture
def seahorse_project(tmp_path: Path) -> dict:
    """A Seahorse project with one Python program."""
    root = tmp_path / "seahorse"
    programs_py = root / "programs_py"
    programs_py.mkdir(parents=True)
    program = programs_py / "flipper.py"
    program.write_text(
        "from seahorse.prelude import *\n"
        "\n"
        "declare_id('Fg6PaFpoGXkYsidMpWTK6W2BeZ7FEfcYkg476zPFsLnS')\n"
        "\n"
        "@instruction\n"
        "def flip(): ...\n"
    )
    (root / "Anchor.toml").write_text("[programs.localnet]\n")
    (root / "Cargo.toml").write_text('[workspace]\nmembers = ["programs/*"]\n')
    return {"root": root, "program": program, "deploy": root / "target" / "deploy"}
