"""
Command-line interface for the C++ console.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from .build import BuildRunner
from .config import ConsoleConfig, load_config
from .errors import BootstrapCompileError, StartupConfigError
from .logging_utils import configure_logging
from .options import LaunchOptions, parse_launch_options
from .paths import SessionPaths
from .session import SessionEngine
from .templates import TemplateStore
from .version import __version__

log = logging.getLogger(__name__)

USAGE = "cppconsole [<project main cpp> <project executable file> [options]]"


def build_cli_parser() -> argparse.ArgumentParser:
    cli = argparse.ArgumentParser(
        prog="cppconsole",
        usage=USAGE,
        description="Type C++ one line at a time; each complete statement is compiled and run.",
        epilog="Type 'exit' to quit, 'reload!' to restart from the template.",
    )
    cli.add_argument(
        "--version",
        action="version",
        version=f"cppconsole {__version__} (Python {sys.version.split()[0]})",
    )
    cli.add_argument("project_main", nargs="?", type=Path, help="Project main file replaced during builds")
    cli.add_argument("project_artifact", nargs="?", type=Path, help="Executable produced by the project build")
    cli.add_argument(
        "-m",
        dest="make_path",
        type=Path,
        metavar="PATH",
        help="Provide project makefile directory or makefile. (defaults to '.')",
    )
    cli.add_argument("--log-level", help="Logging level (default: $CPPCONSOLE_LOG_LEVEL or WARNING)")
    return cli


def build_paths(options: LaunchOptions, workdir: Path) -> SessionPaths:
    if not options.project_mode:
        return SessionPaths.standalone(workdir)
    make_path = options.make_path.resolve() if options.make_path is not None else None
    return SessionPaths.project(
        workdir,
        project_main=options.project_main.resolve(),
        project_artifact=options.project_artifact.resolve(),
        make_path=make_path,
    )


def build_engine(paths: SessionPaths, config: ConsoleConfig, runner: Optional[BuildRunner] = None) -> SessionEngine:
    runner = runner or BuildRunner(paths, config)
    return SessionEngine(paths, runner, TemplateStore(paths.template), config)


def interact(engine: SessionEngine, read_line: Callable[[str], str] = input) -> None:
    """Prompt until 'exit' or end of input."""
    while True:
        try:
            line = read_line(engine.prompt())
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not engine.handle_line(line):
            return


def main(
    argv: list[str] | None = None,
    *,
    read_line: Callable[[str], str] = input,
    workdir: Path | None = None,
    runner_factory: Callable[[SessionPaths, ConsoleConfig], BuildRunner] | None = None,
) -> int:
    cli = build_cli_parser()
    args = cli.parse_args(argv)
    config = load_config()
    configure_logging(args.log_level or config.log_level)

    try:
        options = parse_launch_options(args.project_main, args.project_artifact, args.make_path)
    except StartupConfigError as exc:
        print(f"cppconsole: *** {exc.message}")
        cli.print_help()
        return 1

    paths = build_paths(options, (workdir or Path.cwd()).resolve())
    runner = runner_factory(paths, config) if runner_factory else None
    engine = build_engine(paths, config, runner)
    log.info("Starting session in %s mode", "project" if paths.project_mode else "standalone")
    try:
        try:
            engine.start()
        except BootstrapCompileError as exc:
            print(f"cppconsole: *** {exc.message}")
            return 0
        interact(engine, read_line)
    finally:
        paths.clean()
    return 0


def run() -> None:  # pragma: no cover - console entry point
    sys.exit(main())
