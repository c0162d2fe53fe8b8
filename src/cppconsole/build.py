"""
Compile, execute and roll back one round of generated source.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Optional, TextIO

from .config import ConsoleConfig
from .paths import SessionPaths
from .transaction import FileTransaction

log = logging.getLogger(__name__)

CommandRunner = Callable[..., Any]


class BuildOutcome(str, Enum):
    SUCCESS = "success"
    COMPILE_FAILED = "compile_failed"


@dataclass
class BuildResult:
    outcome: BuildOutcome
    ephemeral: bool = False
    diagnostics: List[str] = field(default_factory=list)
    exit_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.outcome is BuildOutcome.SUCCESS

    @property
    def persisted(self) -> bool:
        return self.ok and not self.ephemeral


def filter_diagnostics(output: str, pattern: str) -> List[str]:
    """Keep only the compiler lines that contain ``pattern`` (``error:`` by default)."""
    return [line for line in output.splitlines() if pattern in line]


def compile_command(paths: SessionPaths, config: ConsoleConfig) -> tuple[List[str], Path]:
    """Return the build argv and the directory to run it from."""
    if not paths.project_mode:
        cmd = [config.compiler, "-w", *config.compiler_flags, "-o", str(paths.artifact), str(paths.source)]
        return cmd, paths.workdir
    make_path = paths.make_path or paths.workdir
    if make_path.is_file():
        return [config.make_tool, "--silent", "-f", make_path.name], make_path.parent
    return [config.make_tool, "--silent"], make_path


class BuildRunner:
    """
    Writes a candidate program, builds it and runs the result.

    Success is judged only by whether the artifact exists after the build.
    The build output goes through a diagnostic filter, and the tool's exit
    status is deliberately not consulted; the artifact is moved aside before
    every build so a stale binary can never be mistaken for a fresh one.
    """

    def __init__(
        self,
        paths: SessionPaths,
        config: Optional[ConsoleConfig] = None,
        command_runner: CommandRunner = subprocess.run,
        out: Optional[TextIO] = None,
    ) -> None:
        self.paths = paths
        self.config = config or ConsoleConfig()
        self.command_runner = command_runner
        self.out = out

    def run(self, full_source: str, ephemeral: bool = False) -> BuildResult:
        source = self.paths.source
        result = BuildResult(outcome=BuildOutcome.COMPILE_FAILED, ephemeral=ephemeral)
        with FileTransaction(source) as source_txn:
            source.write_text(full_source, encoding="utf-8")
            with FileTransaction(self.paths.artifact):
                result.diagnostics = self._build()
                if self.paths.artifact.exists():
                    result.outcome = BuildOutcome.SUCCESS
                    result.exit_code = self._execute()
            if result.persisted:
                source_txn.commit()
        log.info(
            "Round finished: outcome=%s ephemeral=%s persisted=%s",
            result.outcome.value,
            ephemeral,
            result.persisted,
        )
        return result

    def _build(self) -> List[str]:
        if not self.paths.project_mode:
            return self._invoke_build()
        project_main = self.paths.project_main
        with FileTransaction(project_main):
            shutil.copyfile(self.paths.source, project_main)
            diagnostics = self._invoke_build()
        # Make the restored entry file newer than anything built from the
        # console's copy so the project's next build picks it up again.
        if project_main.exists():
            os.utime(project_main, None)
        return diagnostics

    def _invoke_build(self) -> List[str]:
        cmd, cwd = compile_command(self.paths, self.config)
        log.debug("Running %s in %s", " ".join(cmd), cwd)
        try:
            completed = self.command_runner(
                cmd,
                cwd=str(cwd),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
            )
        except KeyboardInterrupt:
            print(file=self.out)
            log.warning("Build interrupted; treating the round as failed")
            # A half-written executable must not pass the existence check.
            if self.paths.artifact.exists():
                self.paths.artifact.unlink()
            return ["cppconsole: *** Build interrupted"]
        except OSError as exc:
            log.error("Could not start %s: %s", cmd[0], exc)
            message = f"cppconsole: *** Could not run {cmd[0]}: {exc}"
            print(message, file=self.out)
            return [message]
        log.debug("%s exited with %s", cmd[0], getattr(completed, "returncode", None))
        diagnostics = filter_diagnostics(getattr(completed, "stdout", None) or "", self.config.error_pattern)
        for line in diagnostics:
            print(line, file=self.out)
        return diagnostics

    def _execute(self) -> Optional[int]:
        executable = str(self.paths.artifact.resolve())
        # Program output shares the console's streams.
        (self.out or sys.stdout).flush()
        try:
            completed = self.command_runner([executable], check=False)
        except KeyboardInterrupt:
            print(file=self.out)
            log.warning("Interrupted %s", executable)
            return None
        except OSError as exc:
            log.error("Could not execute %s: %s", executable, exc)
            return None
        return getattr(completed, "returncode", None)
