"""
Toolchain Protocol — The external C compiler and program runner.

The PGO loop and the orchestrator only talk to this interface, so tests
can substitute a scripted toolchain for a real compiler.
"""

from pathlib import Path
from typing import Mapping, Protocol, runtime_checkable

from cscript.config import CompileConfig
from cscript.vocabulary import BuildStage
from cscript.learning import BuildArm


# Exit code reported for an instrumented run killed by the timeout
TIMEOUT_EXIT_CODE = 124


@runtime_checkable
class Toolchain(Protocol):
    """
    Protocol for toolchains.
    """

    def build(
        self,
        unit: str,
        arm: BuildArm,
        config: CompileConfig,
        output: Path,
        workdir: Path,
        stage: BuildStage = BuildStage.FINAL,
    ) -> Path:
        """
        Compile a translation unit to `output`.

        Intermediate files go to `workdir`. INSTRUMENTED builds define
        the profiler runtime macro.

        Raises:
            ToolchainError: Compiler missing or exited non-zero
        """
        ...

    def run(
        self,
        artifact: Path,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
        cwd: Path | None = None,
    ) -> int:
        """Execute a built program once and return its exit code."""
        ...
