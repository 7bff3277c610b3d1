"""
Toolchain — External compiler and program execution.
"""

from cscript.toolchain.base import TIMEOUT_EXIT_CODE, Toolchain
from cscript.toolchain.system import (
    EXEC_FAILED_EXIT_CODE,
    SystemToolchain,
    build_command,
    is_msvc,
    create_toolchain,
)

__all__ = [
    "TIMEOUT_EXIT_CODE",
    "EXEC_FAILED_EXIT_CODE",
    "Toolchain",
    "SystemToolchain",
    "build_command",
    "is_msvc",
    "create_toolchain",
]
