"""Tests for invocation-tagged logging."""

import json
import logging
from io import StringIO

from cscript.config import create_config
from cscript.observability import (
    configure_logging,
    current_invocation,
    get_logger,
    invocation,
)
from cscript.orchestrator import create_orchestrator


class TestInvocation:
    """Tests for the invocation context."""

    def test_binds_source_and_id(self):
        """The block sees its invocation; outside there is none."""
        assert current_invocation() is None
        with invocation("app.csc") as inv:
            assert current_invocation() is inv
            assert inv.source == "app.csc"
            assert len(inv.id) == 8
        assert current_invocation() is None

    def test_nested_restores_outer(self):
        """Leaving a nested invocation restores the outer one."""
        with invocation("outer.csc") as outer:
            with invocation("inner.csc") as inner:
                assert current_invocation() is inner
                assert inner.id != outer.id
            assert current_invocation() is outer


class TestConfigureLogging:
    """Tests for handler setup and record formatting."""

    def test_quiet_by_default(self):
        """Only warnings and above are shown without verbose."""
        stream = StringIO()
        configure_logging(stream=stream)

        get_logger("pgo.loop").info("profile: 2 symbols")
        get_logger("pgo.loop").warning("instrumented run exited with 3")

        output = stream.getvalue()
        assert "profile: 2 symbols" not in output
        assert "instrumented run exited with 3" in output

    def test_verbose_shows_debug(self):
        """Verbose output includes per-pass debug records."""
        configure_logging(verbose=True, stream=StringIO())
        assert logging.getLogger("cscript").level == logging.DEBUG
        assert get_logger("compiler.pipeline").isEnabledFor(logging.DEBUG)

    def test_readable_line(self):
        """Readable lines carry the invocation id, level and component."""
        stream = StringIO()
        configure_logging(stream=stream)

        with invocation("app.csc") as inv:
            get_logger("config.directives").warning("unknown directive @shader")

        assert stream.getvalue().strip() == (
            f"cscript[{inv.id}] warning: config.directives: unknown directive @shader"
        )

    def test_readable_outside_invocation(self):
        """Records logged outside a compile use '-' for the id."""
        stream = StringIO()
        configure_logging(stream=stream)
        get_logger("learning.store").error("cannot write arms.txt")
        assert stream.getvalue().startswith("cscript[-] error: learning.store:")

    def test_json_line(self):
        """JSON lines name the source document."""
        stream = StringIO()
        configure_logging(json_format=True, stream=stream)

        with invocation("lib/app.csc") as inv:
            get_logger("orchestrator").error("lib/app.csc: final build failed")

        entry = json.loads(stream.getvalue().strip())
        assert entry["level"] == "error"
        assert entry["component"] == "orchestrator"
        assert entry["invocation"] == inv.id
        assert entry["source"] == "lib/app.csc"
        assert entry["message"] == "lib/app.csc: final build failed"

    def test_reconfigure_replaces_handler(self):
        """Configuring twice does not duplicate output."""
        stream = StringIO()
        configure_logging(stream=StringIO())
        configure_logging(stream=stream)

        get_logger("toolchain").warning("no C compiler found")
        assert stream.getvalue().count("no C compiler found") == 1


class TestCompileLogging:
    """Log records produced by real compiles."""

    def test_directive_warning_tagged_with_source(self):
        """A directive warning is attributed to the document being compiled."""
        stream = StringIO()
        configure_logging(json_format=True, stream=stream)

        create_orchestrator().translate("@shader on\nint x;\n", name="gfx.csc")

        entries = [json.loads(line) for line in stream.getvalue().splitlines()]
        warning = next(e for e in entries if "@shader" in e["message"])
        assert warning["source"] == "gfx.csc"
        assert warning["component"] == "config.directives"
        assert warning["invocation"] != "-"

    def test_each_build_gets_its_own_id(self, scripted_toolchain, tmp_path):
        """Two compiles log under two different invocation ids."""
        stream = StringIO()
        configure_logging(verbose=True, json_format=True, stream=stream)

        orchestrator = create_orchestrator(toolchain=scripted_toolchain())
        config = create_config(out=str(tmp_path / "app"))
        orchestrator.build("int main(void){return 0;}\n", config, name="a.csc")
        orchestrator.build("int main(void){return 0;}\n", config, name="b.csc")

        entries = [json.loads(line) for line in stream.getvalue().splitlines()]
        ids = {e["source"]: e["invocation"] for e in entries if e["source"] != "-"}
        assert set(ids) == {"a.csc", "b.csc"}
        assert ids["a.csc"] != ids["b.csc"]
