"""
Shared test configuration.

Provides a scripted toolchain so PGO and orchestrator flows run without
a C compiler, and resets global metrics between tests.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import pytest

from cscript.compiler import PROFILE_ENV_VAR
from cscript.diagnostics import ToolchainError
from cscript.observability import reset_metrics
from cscript.vocabulary import BuildStage


@dataclass
class BuildCall:
    stage: BuildStage
    arm: object
    unit: str
    output: Path
    workdir: Path


class ScriptedToolchain:
    """
    Toolchain double.

    `build` writes the unit to the output path (or fails for the stages in
    `fail_stages`); `run` writes `profile_text` to `$CS_PROFILE_OUT` when it
    is not None and returns `run_exit_code`.
    """

    def __init__(
        self,
        profile_text: str | None = None,
        run_exit_code: int = 0,
        fail_stages: tuple[BuildStage, ...] = (),
    ):
        self.profile_text = profile_text
        self.run_exit_code = run_exit_code
        self.fail_stages = fail_stages
        self.builds: list[BuildCall] = []
        self.runs: list[dict] = []

    def build(self, unit, arm, config, output, workdir, stage=BuildStage.FINAL):
        self.builds.append(BuildCall(stage, arm, unit, Path(output), Path(workdir)))
        if stage in self.fail_stages:
            raise ToolchainError(
                f"{stage.value} build failed (exit 1)",
                stage=stage,
                returncode=1,
                output="cc: error: scripted failure\n",
            )
        Path(output).write_text(unit, encoding="utf-8")
        return Path(output)

    def run(self, artifact, env=None, timeout=None, cwd=None):
        env = dict(env or {})
        self.runs.append({"artifact": Path(artifact), "env": env, "timeout": timeout, "cwd": cwd})
        if self.profile_text is not None:
            Path(env[PROFILE_ENV_VAR]).write_text(self.profile_text, encoding="utf-8")
        return self.run_exit_code


@pytest.fixture
def scripted_toolchain():
    """Factory: scripted_toolchain(profile_text=..., run_exit_code=..., fail_stages=...)."""
    return ScriptedToolchain


@pytest.fixture(autouse=True)
def fresh_metrics():
    reset_metrics()
    yield


@pytest.fixture(autouse=True)
def detach_log_handlers():
    """Drop handlers bound to streams captured by a finished test."""
    yield
    package_logger = logging.getLogger("cscript")
    package_logger.handlers.clear()
    package_logger.propagate = True
