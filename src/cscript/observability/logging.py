"""
Logging — Log lines tagged with the compile that produced them.

Each orchestrated compile runs inside `invocation(source_name)`, which
binds a short id and the source name to the current context. Records from
every `cscript.*` logger pick both up, so `--verbose` output from the
pipeline, the PGO loop and the learner can be traced to one document.
"""

import logging
import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, TextIO
from uuid import uuid4


ROOT_LOGGER = "cscript"


@dataclass(frozen=True)
class Invocation:
    """One compile: a short id and the name of the source document."""
    id: str
    source: str


_current: ContextVar[Invocation | None] = ContextVar("cscript_invocation", default=None)


def current_invocation() -> Invocation | None:
    return _current.get()


@contextmanager
def invocation(source: str = "<input>") -> Iterator[Invocation]:
    """Run the block as one compile of `source`."""
    current = Invocation(id=uuid4().hex[:8], source=source)
    token = _current.set(current)
    try:
        yield current
    finally:
        _current.reset(token)


class InvocationFilter(logging.Filter):
    """Stamps records with the active invocation."""

    def filter(self, record: logging.LogRecord) -> bool:
        current = _current.get()
        record.invocation_id = current.id if current else "-"
        record.source = current.source if current else "-"
        return True


def _component(record: logging.LogRecord) -> str:
    return record.name.removeprefix(ROOT_LOGGER + ".")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for build logs that are post-processed."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "component": _component(record),
            "invocation": getattr(record, "invocation_id", "-"),
            "source": getattr(record, "source", "-"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class ReadableFormatter(logging.Formatter):
    """`cscript[id] level: component: message`, shaped like compiler output."""

    def format(self, record: logging.LogRecord) -> str:
        iid = getattr(record, "invocation_id", "-")
        line = f"cscript[{iid}] {record.levelname.lower()}: {_component(record)}: {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    verbose: bool = False,
    json_format: bool = False,
    stream: TextIO | None = None,
) -> None:
    """
    Route `cscript.*` records to one stream (stderr by default).

    Warnings and errors are always shown; `verbose` adds info and debug
    records from the passes, the PGO loop and the learner.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.addFilter(InvocationFilter())
    handler.setFormatter(JSONFormatter() if json_format else ReadableFormatter())

    package_logger = logging.getLogger(ROOT_LOGGER)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a cscript component."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
