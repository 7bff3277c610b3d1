"""
System Toolchain — clang / gcc / cl driven through `subprocess`.

The compiler is the first of `[preferred, clang, gcc]` found on PATH
(MSVC-style `clang-cl` and `cl` are also tried on Windows).
"""

import os
import shutil
import signal
import subprocess
import sys
import time
from pathlib import Path
from typing import Callable, Mapping

from cscript.config import CompileConfig
from cscript.diagnostics import ToolchainError
from cscript.observability import get_logger
from cscript.vocabulary import BuildStage, OptLevel
from cscript.learning import BuildArm
from cscript.compiler.prelude import PROFILE_BUILD_MACRO
from cscript.toolchain.base import TIMEOUT_EXIT_CODE


logger = get_logger("toolchain.system")

MSVC_DRIVERS = frozenset({"cl", "clang-cl"})

# Exit code reported when the program could not be started at all
EXEC_FAILED_EXIT_CODE = 127

_GNU_OPT = {
    OptLevel.O0: ["-O0"],
    OptLevel.O1: ["-O1"],
    OptLevel.O2: ["-O2"],
    OptLevel.O3: ["-O3"],
    OptLevel.SIZE: ["-Os"],
    OptLevel.MAX: ["-O3", "-march=native"],
}

_MSVC_OPT = {
    OptLevel.O0: ["/Od"],
    OptLevel.O1: ["/O1"],
    OptLevel.O2: ["/O2"],
    OptLevel.O3: ["/O2"],
    OptLevel.SIZE: ["/O1"],
    OptLevel.MAX: ["/O2"],
}


def is_msvc(cc: str) -> bool:
    return Path(cc).stem.lower() in MSVC_DRIVERS


def build_command(
    cc: str,
    config: CompileConfig,
    arm: BuildArm,
    source: Path,
    output: Path,
    profile_build: bool = False,
) -> list[str]:
    """
    Command line for one compile. The arm's knobs override the config's
    `opt`, `lto` and `fast_math`.
    """
    strict_warnings = config.hardline or config.strict
    cmd = [cc]

    if is_msvc(cc):
        cmd.append("/nologo")
        cmd.extend(_MSVC_OPT[arm.opt])
        if strict_warnings:
            cmd.extend(["/W4", "/WX"])
        elif config.warn_as_error:
            cmd.append("/WX")
        if arm.lto:
            cmd.append("/GL")
        if arm.fast_math:
            cmd.append("/fp:fast")
        if config.debug:
            cmd.append("/Zi")
        if config.hardline_mode:
            cmd.append("/DCS_HARDLINE=1")
        if profile_build:
            cmd.append(f"/D{PROFILE_BUILD_MACRO}=1")
        cmd.extend(f"/D{d}" for d in config.defines)
        cmd.extend(f"/I{p}" for p in config.incs)
        cmd.append(str(source))
        cmd.append(f"/Fe:{output}")
        if config.libpaths or config.links:
            cmd.append("/link")
            cmd.extend(f"/LIBPATH:{lp}" for lp in config.libpaths)
            cmd.extend(l if l.endswith(".lib") else f"{l}.lib" for l in config.links)
        return cmd

    cmd.append("-std=c11")
    cmd.extend(_GNU_OPT[arm.opt])
    if strict_warnings:
        cmd.extend(["-Wall", "-Wextra", "-Werror", "-Wconversion", "-Wsign-conversion"])
    elif config.warn_as_error:
        cmd.append("-Werror")
    if arm.lto:
        cmd.append("-flto")
    if arm.fast_math:
        cmd.append("-ffast-math")
    if config.debug:
        cmd.append("-g")
    if config.target:
        cmd.append(f"--target={config.target}")
    if config.hardline_mode:
        cmd.append("-DCS_HARDLINE=1")
    if profile_build:
        cmd.append(f"-D{PROFILE_BUILD_MACRO}=1")
    cmd.extend(f"-D{d}" for d in config.defines)
    cmd.extend(f"-I{p}" for p in config.incs)
    cmd.append(str(source))
    cmd.extend(["-o", str(output)])
    cmd.extend(f"-L{lp}" for lp in config.libpaths)
    cmd.extend(f"-l{l}" for l in config.links)
    return cmd


class SystemToolchain:
    """
    Toolchain backed by the host C compiler.

    `which` is injectable so compiler discovery can be tested without
    touching PATH.
    """

    def __init__(
        self,
        cc_prefer: str = "",
        verbose: bool = False,
        which: Callable[[str], str | None] = shutil.which,
    ):
        self.cc_prefer = cc_prefer
        self.verbose = verbose
        self._which = which
        self._cc: str | None = None

    def candidates(self) -> list[str]:
        cands = [self.cc_prefer] if self.cc_prefer else []
        if sys.platform == "win32":
            cands.extend(["clang", "clang-cl", "cl", "gcc"])
        else:
            cands.extend(["clang", "gcc"])
        return cands

    def pick_cc(self) -> str:
        """
        First candidate found on PATH.

        Raises:
            ToolchainError: No candidate is installed
        """
        if self._cc is None:
            for cand in self.candidates():
                if self._which(cand):
                    self._cc = cand
                    break
            else:
                raise ToolchainError(
                    f"no C compiler found (tried: {', '.join(self.candidates())})"
                )
            logger.debug(f"using C compiler {self._cc}")
        return self._cc

    def build(
        self,
        unit: str,
        arm: BuildArm,
        config: CompileConfig,
        output: Path,
        workdir: Path,
        stage: BuildStage = BuildStage.FINAL,
    ) -> Path:
        try:
            cc = self.pick_cc()
        except ToolchainError as e:
            e.stage = stage
            raise

        source = Path(workdir) / f"{stage.value}.c"
        source.write_text(unit, encoding="utf-8")

        cmd = build_command(
            cc, config, arm, source, Path(output),
            profile_build=stage is BuildStage.INSTRUMENTED,
        )
        if self.verbose:
            logger.info(f"CC: {subprocess.list2cmdline(cmd)}")

        started = time.perf_counter()
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ToolchainError(
                f"failed to start {cc}: {e}", stage=stage, command=cmd,
            ) from e
        elapsed_ms = (time.perf_counter() - started) * 1000

        if proc.returncode != 0:
            raise ToolchainError(
                f"{stage.value} build failed (exit {proc.returncode})",
                stage=stage,
                returncode=proc.returncode,
                command=cmd,
                output=(proc.stderr or "") + (proc.stdout or ""),
            )
        logger.debug(f"{stage.value} build with {arm.key} took {elapsed_ms:.0f} ms")
        return Path(output)

    def run(
        self,
        artifact: Path,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
        cwd: Path | None = None,
    ) -> int:
        """
        Run `artifact` with no stdin, in its own session. A run that
        exceeds `timeout` is killed together with every process it started
        and reported as exit code 124.
        """
        run_env = dict(os.environ)
        if env:
            run_env.update(env)
        try:
            proc = subprocess.Popen(
                [str(artifact)],
                env=run_env,
                cwd=str(cwd) if cwd is not None else None,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                start_new_session=True,
            )
        except OSError as e:
            logger.warning(f"failed to run {artifact}: {e}")
            return EXEC_FAILED_EXIT_CODE

        try:
            proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill_session(proc)
            proc.communicate()
            logger.warning(f"{artifact} exceeded {timeout}s and was killed")
            return TIMEOUT_EXIT_CODE
        return proc.returncode


def _kill_session(proc: subprocess.Popen) -> None:
    """Kill a program started with `start_new_session` and its descendants."""
    if sys.platform == "win32":
        proc.kill()
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        # nothing left in the group
        return


def create_toolchain(config: CompileConfig) -> SystemToolchain:
    """Toolchain honouring the config's compiler preference."""
    return SystemToolchain(cc_prefer=config.cc_prefer, verbose=config.verbose)
