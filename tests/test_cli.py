from pathlib import Path

import pytest

from cppconsole.build import BuildRunner
from cppconsole.cli import main

from conftest import FakeToolchain


def scripted(lines):
    remaining = list(lines)
    prompts = []

    def read_line(prompt: str) -> str:
        prompts.append(prompt)
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    read_line.prompts = prompts
    return read_line


def fake_runner_factory(store: dict):
    def factory(paths, config):
        toolchain = FakeToolchain(paths)
        store["toolchain"] = toolchain
        store["paths"] = paths
        return BuildRunner(paths, config, command_runner=toolchain)

    return factory


def test_session_runs_until_exit_and_cleans_up(tmp_path, capsys):
    store: dict = {}
    reader = scripted(["int x = 5;", "if (x) {", "x++;", "}", "x@", "exit", "never read"])
    code = main([], read_line=reader, workdir=tmp_path, runner_factory=fake_runner_factory(store))
    assert code == 0
    assert reader.prompts == ["CppConsole:>", "CppConsole:>", "CppConsole{>", "CppConsole{>", "CppConsole:>", "CppConsole:>"]
    toolchain = store["toolchain"]
    # template, declaration, block, display
    assert len(toolchain.builds) == 4
    assert not (tmp_path / "cpp_console.cpp").exists()
    assert not (tmp_path / "cpp_console.cpp.bak").exists()
    assert not (tmp_path / "cpp_console.exe").exists()
    assert (tmp_path / "cpp_console.config").exists()
    assert "Reloading..." in capsys.readouterr().out


def test_end_of_input_behaves_like_exit(tmp_path):
    store: dict = {}
    code = main([], read_line=scripted(["int y = 1;"]), workdir=tmp_path, runner_factory=fake_runner_factory(store))
    assert code == 0
    assert not (tmp_path / "cpp_console.cpp").exists()


def test_bootstrap_failure_asks_to_fix_template(tmp_path, capsys):
    (tmp_path / "cpp_console.config").write_text("int main() {\n#error broken\n}\n", encoding="utf-8")
    reader = scripted(["int x;"])
    code = main([], read_line=reader, workdir=tmp_path, runner_factory=fake_runner_factory({}))
    assert code == 0
    assert reader.prompts == []
    assert "Ensure cpp_console.config has no syntax errors" in capsys.readouterr().out
    assert (tmp_path / "cpp_console.config").exists()
    assert not (tmp_path / "cpp_console.cpp").exists()


def test_project_main_without_executable_is_rejected(tmp_path, capsys):
    main_cpp = tmp_path / "main.cpp"
    main_cpp.write_text("int main() {}\n", encoding="utf-8")
    code = main([str(main_cpp)], read_line=scripted([]), workdir=tmp_path)
    assert code == 1
    out = capsys.readouterr().out
    assert "The Project executable file was not provided." in out
    assert "usage:" in out


def test_missing_project_main_is_rejected(tmp_path, capsys):
    code = main([str(tmp_path / "nope.cpp"), str(tmp_path / "app")], read_line=scripted([]), workdir=tmp_path)
    assert code == 1
    assert "Could not find project main file" in capsys.readouterr().out


def test_missing_project_executable_is_rejected(tmp_path, capsys):
    main_cpp = tmp_path / "main.cpp"
    main_cpp.write_text("int main() {}\n", encoding="utf-8")
    code = main([str(main_cpp), str(tmp_path / "app")], read_line=scripted([]), workdir=tmp_path)
    assert code == 1
    assert "Could not find project executable file" in capsys.readouterr().out


def test_missing_make_directory_is_rejected(tmp_path, capsys):
    main_cpp = tmp_path / "main.cpp"
    main_cpp.write_text("int main() {}\n", encoding="utf-8")
    artifact = tmp_path / "app"
    artifact.write_text("bin", encoding="utf-8")
    code = main(
        [str(main_cpp), str(artifact), "-m", str(tmp_path / "missing")],
        read_line=scripted([]),
        workdir=tmp_path,
    )
    assert code == 1
    assert "Could not find makefile directory" in capsys.readouterr().out


def test_unknown_flag_is_a_usage_error(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        main(["--bogus"], read_line=scripted([]), workdir=tmp_path)
    assert excinfo.value.code == 2


def test_project_session_keeps_user_artifact(tmp_path):
    project = tmp_path / "project"
    project.mkdir()
    main_cpp = project / "main.cpp"
    main_cpp.write_text("// real main\n", encoding="utf-8")
    artifact = project / "app"
    artifact.write_text("user binary", encoding="utf-8")
    store: dict = {}
    code = main(
        [str(main_cpp), str(artifact), "-m", str(project)],
        read_line=scripted(["int x = 1;", "exit"]),
        workdir=tmp_path,
        runner_factory=fake_runner_factory(store),
    )
    assert code == 0
    assert store["toolchain"].build_commands[0] == ["make", "--silent"]
    assert main_cpp.read_text(encoding="utf-8") == "// real main\n"
    assert artifact.read_text(encoding="utf-8") == "user binary"
    assert not (tmp_path / "cpp_console.cpp").exists()
    assert Path(store["paths"].artifact) == artifact.resolve()


def test_interrupting_a_running_program_returns_to_prompt(tmp_path):
    store: dict = {}

    def factory(paths, config):
        toolchain = FakeToolchain(paths)
        store["toolchain"] = toolchain

        def runner(cmd, **kwargs):
            if kwargs.get("stdout") is None and "while (true) {}" in paths.source.read_text(encoding="utf-8"):
                raise KeyboardInterrupt
            return toolchain(cmd, **kwargs)

        return BuildRunner(paths, config, command_runner=runner)

    reader = scripted(["int x = 5;", "while (true) {}!", "x@", "exit"])
    code = main([], read_line=reader, workdir=tmp_path, runner_factory=factory)
    assert code == 0
    assert len(reader.prompts) == 4
    assert "cpp_console_print(x );" in store["toolchain"].builds[-1]
    assert "while (true) {}" not in store["toolchain"].builds[-1]
