"""
Build Workspace — Per-invocation directory for intermediate artifacts.

Holds the generated `.c` files, the instrumented executable and the
profile counts. Removed on every exit path unless retention is requested.
"""

import shutil
import tempfile
from pathlib import Path

from cscript.observability import get_logger


logger = get_logger("orchestrator.workspace")


class BuildWorkspace:
    """
    Context manager around a temporary directory.

    Usage:
        with BuildWorkspace() as ws:
            ws.file("final.c").write_text(unit)
    """

    def __init__(self, keep: bool = False, prefix: str = "cscript-", parent: Path | None = None):
        self.keep = keep
        self.prefix = prefix
        self.parent = parent
        self.path: Path | None = None

    def __enter__(self) -> "BuildWorkspace":
        self.path = Path(tempfile.mkdtemp(prefix=self.prefix, dir=self.parent))
        logger.debug(f"workspace {self.path}")
        return self

    def __exit__(self, *args) -> None:
        if self.path is None:
            return
        if self.keep:
            logger.info(f"keeping intermediates in {self.path}")
            return
        shutil.rmtree(self.path, ignore_errors=True)

    def file(self, name: str) -> Path:
        if self.path is None:
            raise RuntimeError("workspace is not open")
        return self.path / name
