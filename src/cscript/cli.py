"""
C-Script Compiler CLI

Usage:
    cscript [options] file.csc

Examples:
    # Build ./hello from hello.csc
    cscript hello.csc

    # Two-pass profile-guided build with adaptive optimization settings
    cscript app.csc --profile --adaptive -o app

    # Print the generated C translation unit without building
    cscript app.csc --emit-c
"""

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from cscript.config import CompileConfig, create_config
from cscript.diagnostics import Diagnostic, ToolchainError
from cscript.observability import MetricsSnapshot, configure_logging
from cscript.vocabulary import OptLevel
from cscript.orchestrator import create_orchestrator


EXIT_USAGE = 2

_OPT_FLAGS = {
    "0": OptLevel.O0,
    "1": OptLevel.O1,
    "2": OptLevel.O2,
    "3": OptLevel.O3,
    "s": OptLevel.SIZE,
    "size": OptLevel.SIZE,
    "max": OptLevel.MAX,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cscript",
        description="C-Script compiler - lower .csc sources to C and build them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0  success
  1  compile error (structural, exhaustiveness, plugin)
  2  usage error or unreadable input
  3  instrumented (profiling) build failed
  4  final build failed
        """,
    )

    parser.add_argument("input", nargs="?", help="C-Script source file (.csc)")

    # Output control
    parser.add_argument("-o", "--output", help="Output executable (default: input stem)")
    parser.add_argument("--emit-c", action="store_true",
                        help="Print the generated C to stdout and exit without building")
    parser.add_argument("--show-c", action="store_true",
                        help="Echo the generated C to stderr when building")
    parser.add_argument("--keep-temps", action="store_true",
                        help="Keep intermediate files (generated C, profile)")

    # Code generation
    parser.add_argument("-O", dest="opt", choices=sorted(_OPT_FLAGS),
                        help="Optimization level: -O0 -O1 -O2 -O3 -Os -Omax")
    parser.add_argument("--no-lto", action="store_true", help="Disable link-time optimization")
    parser.add_argument("--debug", action="store_true", help="Emit debug symbols")
    parser.add_argument("--target", help="Target triple")
    parser.add_argument("--cc", help="Preferred C compiler")

    # Checking policy
    policy = parser.add_mutually_exclusive_group()
    policy.add_argument("--strict", action="store_true", help="Force hardline checking")
    policy.add_argument("--relaxed", action="store_true",
                        help="Runtime enum assertions warn instead of abort")
    parser.add_argument("--warn-as-error", action="store_true",
                        help="Treat C compiler warnings as errors")

    # Profiling and learning
    parser.add_argument("--profile", action="store_true", help="Two-pass profile-guided build")
    parser.add_argument("--hot-set-size", type=int, help="Maximum number of hot functions")
    parser.add_argument("--profile-timeout", type=float,
                        help="Seconds before the instrumented run is killed")
    parser.add_argument("--adaptive", action="store_true",
                        help="Choose optimization settings from past builds")
    parser.add_argument("--learning-store", type=Path,
                        help="Arm statistics file (default: ~/.cscript/arms.txt)")

    # Diagnostics output
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging and a metrics summary on stderr")
    parser.add_argument("--log-json", action="store_true", help="Log as JSON lines")

    return parser


def default_output(input_path: Path) -> str:
    stem = input_path.stem or "a"
    return f"{stem}.exe" if sys.platform == "win32" else f"./{stem}"


def config_from_args(args: argparse.Namespace) -> CompileConfig:
    """
    Raises:
        ValidationError: Inconsistent or out-of-range options
    """
    kwargs = {
        "out": args.output or default_output(Path(args.input)),
        "lto": not args.no_lto,
        "debug": args.debug,
        "strict": args.strict,
        "relaxed": args.relaxed,
        "warn_as_error": args.warn_as_error,
        "profile": args.profile,
        "adaptive": args.adaptive,
        "show_c": args.show_c,
        "verbose": args.verbose,
        "keep_temps": args.keep_temps,
    }
    if args.opt is not None:
        kwargs["opt"] = _OPT_FLAGS[args.opt]
    if args.target:
        kwargs["target"] = args.target
    if args.cc:
        kwargs["cc_prefer"] = args.cc
    if args.hot_set_size is not None:
        kwargs["hot_set_size"] = args.hot_set_size
    if args.profile_timeout is not None:
        kwargs["profile_timeout_seconds"] = args.profile_timeout
    if args.learning_store is not None:
        kwargs["learning_store_path"] = args.learning_store
    return create_config(**kwargs)


def print_diagnostics(diagnostics: list[Diagnostic]) -> None:
    for d in diagnostics:
        print(d.format(), file=sys.stderr)


def print_metrics(metrics: MetricsSnapshot | None) -> None:
    if metrics is None:
        return
    for line in metrics.summary():
        print(f"metrics: {line}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.input:
        print("error: missing input .csc file", file=sys.stderr)
        return EXIT_USAGE

    configure_logging(verbose=args.verbose, json_format=args.log_json)

    path = Path(args.input)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"error: cannot read {path}: {e}", file=sys.stderr)
        return EXIT_USAGE

    try:
        config = config_from_args(args)
    except ValidationError as e:
        print(f"error: invalid options: {e}", file=sys.stderr)
        return EXIT_USAGE

    orchestrator = create_orchestrator()

    if args.emit_c:
        translation = orchestrator.translate(text, config, name=str(path))
        print_diagnostics(translation.diagnostics)
        if args.verbose:
            print_metrics(translation.metrics)
        if not translation.success:
            return translation.exit_code
        sys.stdout.write(translation.text)
        return 0

    result = orchestrator.build(text, config, name=str(path))
    if args.show_c and result.text:
        sys.stderr.write(result.text)
    print_diagnostics(result.diagnostics)
    if args.verbose:
        print_metrics(result.metrics)

    if not result.success:
        if isinstance(result.error, ToolchainError) and result.error.output:
            sys.stderr.write(result.error.output)
        return result.exit_code

    if result.workspace is not None:
        print(f"intermediates kept in {result.workspace}", file=sys.stderr)
    print(result.artifact)
    return 0


if __name__ == "__main__":
    sys.exit(main())
