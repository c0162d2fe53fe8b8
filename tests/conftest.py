import subprocess
from pathlib import Path

import pytest

from cppconsole.build import BuildRunner
from cppconsole.config import ConsoleConfig
from cppconsole.paths import SessionPaths
from cppconsole.session import SessionEngine
from cppconsole.templates import TemplateStore


@pytest.fixture(autouse=True)
def _clean_console_env(monkeypatch):
    """Keep developer settings from leaking into tests."""
    for name in (
        "CXX",
        "CPPCONSOLE_CXX",
        "CPPCONSOLE_CXXFLAGS",
        "CPPCONSOLE_MAKE",
        "CPPCONSOLE_STATIC_PREFIX",
        "CPPCONSOLE_ERROR_PATTERN",
        "CPPCONSOLE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


class FakeToolchain:
    """
    Stands in for subprocess.run: a "compile" succeeds unless the source
    contains ``fail_token``, and executing the artifact is only recorded.
    """

    def __init__(self, paths: SessionPaths, fail_token: str = "#error"):
        self.paths = paths
        self.fail_token = fail_token
        self.builds: list[str] = []
        self.build_commands: list[list[str]] = []
        self.executions: list[str] = []
        self.raise_on_build: Exception | None = None

    def _built_source(self) -> Path:
        if self.paths.project_mode:
            return self.paths.project_main
        return self.paths.source

    def __call__(self, cmd, **kwargs):
        if kwargs.get("stdout") is subprocess.PIPE:
            if self.raise_on_build is not None:
                raise self.raise_on_build
            self.build_commands.append(list(cmd))
            text = self._built_source().read_text(encoding="utf-8")
            self.builds.append(text)
            if self.fail_token in text:
                output = "cpp_console.cpp:9:3: error: expected ';' before '}' token\ncpp_console.cpp:2:1: warning: unused\n"
                return subprocess.CompletedProcess(cmd, 1, stdout=output)
            self.paths.artifact.write_text("binary", encoding="utf-8")
            return subprocess.CompletedProcess(cmd, 0, stdout="")
        self.executions.append(cmd[0])
        return subprocess.CompletedProcess(cmd, 0)


@pytest.fixture
def paths(tmp_path) -> SessionPaths:
    return SessionPaths.standalone(tmp_path)


@pytest.fixture
def toolchain(paths) -> FakeToolchain:
    return FakeToolchain(paths)


@pytest.fixture
def runner(paths, toolchain) -> BuildRunner:
    return BuildRunner(paths, ConsoleConfig(), command_runner=toolchain)


@pytest.fixture
def engine(paths, runner) -> SessionEngine:
    session = SessionEngine(paths, runner, TemplateStore(paths.template), ConsoleConfig())
    session.start()
    return session
