"""One-shot setup that runs before watching starts.

Stages, in order:
1. Check the toolset (the only fatal stage)
2. Map program names
3. Start the test validator
4. Build once if `target/deploy` does not exist yet
5. Collect keypairs and ELFs from `target/deploy`
6. Sync program ids
7. Build programs
8. Deploy programs
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from watchso.config import WatchConfig
from watchso.constants import DEPLOY, JSON, SO, TARGET
from watchso.framework.toolchain import start_test_validator
from watchso.progress import Progress, StageResult

if TYPE_CHECKING:
    from watchso.framework.base import Framework

logger = logging.getLogger(__name__)


@dataclass
class InitializationReport:
    """What happened during initialization."""

    stages: list[StageResult] = field(default_factory=list)
    validator: asyncio.subprocess.Process | None = None
    keypair_paths: list[Path] = field(default_factory=list)
    elf_paths: list[Path] = field(default_factory=list)
    build_paths: list[Path] = field(default_factory=list)

    @property
    def failed_stages(self) -> list[StageResult]:
        return [stage for stage in self.stages if not stage.ok]

    @property
    def children(self) -> list[asyncio.subprocess.Process]:
        """Child processes that must be stopped when watching ends."""
        return [self.validator] if self.validator is not None else []


async def _stage(
    report: InitializationReport,
    progress: Progress,
    cb: Callable[[], Awaitable[Any]],
) -> Any | None:
    """Run a single step stage, recording instead of raising its error."""
    stage = StageResult(name=progress.message, total=1)
    report.stages.append(stage)
    try:
        result = await progress.spinner_with(cb)
    except Exception as e:
        logger.debug(f"{progress.message} failed", exc_info=True)
        stage.failures.append((progress.message, str(e)))
        return None

    if getattr(result, "success", True) is False:
        stage.failures.append((progress.message, f"exit code {result.returncode}"))
    return result


def collect_deploy_outputs(deploy_path: Path) -> tuple[list[Path], list[Path]]:
    """Keypair and ELF files in `deploy_path`, sorted."""
    if not deploy_path.is_dir():
        logger.warning(f"{deploy_path} does not exist")
        return [], []

    keypair_paths: list[Path] = []
    elf_paths: list[Path] = []
    for path in sorted(deploy_path.iterdir()):
        ext = path.suffix.lstrip(".")
        if ext == JSON:
            keypair_paths.append(path)
        elif ext == SO:
            elf_paths.append(path)

    return keypair_paths, elf_paths


async def initialize_framework(framework: "Framework", config: WatchConfig) -> InitializationReport:
    """Run the initialization pipeline for `framework`.

    Raises:
        ToolNotFound: If the toolset check fails.
    """
    report = InitializationReport()
    origin = framework.origin

    toolset = Progress(
        "Checking toolset...",
        success_message="Toolset installed",
        error_message="Missing toolset",
    )
    await toolset.spinner_with(framework.check_toolset)
    report.stages.append(StageResult(name=toolset.message, total=1))

    await _stage(
        report,
        Progress(
            "Mapping programs...",
            success_message="Mapped programs",
            error_message="Could not map programs",
        ),
        framework.map_program_names,
    )

    if config.start_validator:
        report.validator = await _stage(
            report,
            Progress(
                "Starting Solana test validator...",
                success_message="Running Solana test validator",
                error_message="Could not start Solana test validator",
            ),
            lambda: start_test_validator(origin, config.validator_wait),
        )

    # Building creates the program keypairs and ELFs on the first run
    deploy_path = origin / TARGET / DEPLOY
    if not deploy_path.exists():

        async def setup():
            command = await framework.build(origin)
            return await command.output()

        await _stage(
            report,
            Progress("Setting up...", success_message="Setup success", error_message="Setup error"),
            setup,
        )

    keypair_paths, elf_paths = collect_deploy_outputs(deploy_path)
    report.keypair_paths = keypair_paths
    report.elf_paths = elf_paths

    build_paths: dict[Path, None] = {}
    for path in [*keypair_paths, *elf_paths]:
        program_path = await framework.get_program_path(path)
        if program_path is not None:
            build_paths[program_path] = None
    report.build_paths = list(build_paths)

    async def sync_program_id(keypair_path: Path) -> None:
        # An id that is already up to date is not a failure
        await framework.update_program_id(keypair_path)

    report.stages.append(
        await Progress(
            "Checking program ids...",
            success_message="Program ids are up to date",
            error_message="Couldn't update program ids",
        ).progress_with(keypair_paths, sync_program_id)
    )

    async def build(program_path: Path):
        return await (await framework.build(program_path)).output()

    report.stages.append(
        await Progress(
            "Building...",
            success_message="Built programs",
            error_message="Couldn't build programs",
        ).progress_with(report.build_paths, build)
    )

    async def deploy(elf_path: Path):
        return await (await framework.deploy(elf_path)).output()

    report.stages.append(
        await Progress(
            "Deploying programs...",
            success_message="Deployed programs",
            error_message="Couldn't deploy programs",
        ).progress_with(elf_paths, deploy)
    )

    return report
