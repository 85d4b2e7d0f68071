"""Unit tests for utility functions (tsed_cli.utils).

Tests cover:
- run_command (success, non-zero exit)
- CommandRunner.run / run_sync and CommandError
- load_json / find_package_json
- import_module
- ensure_dir / format_duration
- Rich output helpers
"""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from tsed_cli.utils import (
    CommandError,
    CommandResult,
    CommandRunner,
    TsedCliError,
    create_progress,
    ensure_dir,
    find_package_json,
    format_duration,
    import_module,
    load_json,
    print_error,
    print_success,
    print_warning,
    run_command,
)


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_list_command(self, mock_subprocess):
        proc = mock_subprocess(stdout="hello\n", returncode=0)
        with patch("asyncio.create_subprocess_exec", return_value=proc) as exec_mock:
            code, out, err = await run_command(["echo", "hello"], cwd="/tmp")

        assert (code, out, err) == (0, "hello", "")
        assert exec_mock.call_args.args == ("echo", "hello")
        assert exec_mock.call_args.kwargs["cwd"] == "/tmp"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_zero_exit(self, mock_subprocess):
        proc = mock_subprocess(stderr="boom\n", returncode=2)
        with patch("asyncio.create_subprocess_exec", return_value=proc):
            code, out, err = await run_command(["npm", "run", "nope"])

        assert (code, out, err) == (2, "", "boom")


# ---------------------------------------------------------------------------
# CommandRunner
# ---------------------------------------------------------------------------


class TestCommandRunner:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_run_success(self, mock_subprocess):
        proc = mock_subprocess(stdout="ok")
        with patch("asyncio.create_subprocess_exec", return_value=proc):
            result = await CommandRunner().run("npm", ["install"], cwd="/project")

        assert isinstance(result, CommandResult)
        assert result.cmd == ["npm", "install"]
        assert result.command_line == "npm install"
        assert result.stdout == "ok"
        assert result.ok

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_run_failure_raises(self, mock_subprocess):
        proc = mock_subprocess(stderr="npm ERR! missing script", returncode=1)
        with patch("asyncio.create_subprocess_exec", return_value=proc):
            with pytest.raises(CommandError) as exc_info:
                await CommandRunner().run("npm", ["run", "nope"])

        error = exc_info.value
        assert isinstance(error, TsedCliError)
        assert error.returncode == 1
        assert error.stderr == "npm ERR! missing script"
        assert error.cmd == ["npm", "run", "nope"]
        assert "exit code 1" in str(error)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_run_missing_binary(self):
        with patch("asyncio.create_subprocess_exec", side_effect=FileNotFoundError("yarn")):
            with pytest.raises(CommandError) as exc_info:
                await CommandRunner().run("yarn", ["--version"])
        assert exc_info.value.returncode == 127

    @pytest.mark.unit
    def test_run_sync_success(self):
        completed = subprocess.CompletedProcess(["yarn", "--version"], 0, stdout="1.22.5\n", stderr="")
        with patch("subprocess.run", return_value=completed):
            result = CommandRunner().run_sync("yarn", ["--version"])
        assert result.stdout == "1.22.5"

    @pytest.mark.unit
    def test_run_sync_failure(self):
        completed = subprocess.CompletedProcess(["yarn", "--version"], 1, stdout="", stderr="nope")
        with patch("subprocess.run", return_value=completed):
            with pytest.raises(CommandError):
                CommandRunner().run_sync("yarn", ["--version"])

    @pytest.mark.unit
    def test_run_sync_missing_binary(self):
        with patch("subprocess.run", side_effect=FileNotFoundError("yarn")):
            with pytest.raises(CommandError) as exc_info:
                CommandRunner().run_sync("yarn", ["--version"])
        assert exc_info.value.returncode == 127


# ---------------------------------------------------------------------------
# JSON / file-system helpers
# ---------------------------------------------------------------------------


class TestLoadJson:
    @pytest.mark.unit
    def test_load_object(self, tmp_path: Path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"a": 1}), encoding="utf-8")
        assert load_json(path) == {"a": 1}

    @pytest.mark.unit
    def test_load_non_object_is_wrapped(self, tmp_path: Path):
        path = tmp_path / "data.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_json(path) == {"_root": [1, 2]}

    @pytest.mark.unit
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_json(tmp_path / "missing.json")


class TestFindPackageJson:
    @pytest.mark.unit
    def test_finds_in_current_dir(self, tmp_project_dir: Path, write_package_json):
        write_package_json(tmp_project_dir, {"name": "here"})
        path, data = find_package_json(tmp_project_dir)
        assert path == (tmp_project_dir / "package.json").resolve()
        assert data["name"] == "here"

    @pytest.mark.unit
    def test_walks_up(self, tmp_project_dir: Path, write_package_json):
        write_package_json(tmp_project_dir, {"name": "parent"})
        nested = tmp_project_dir / "src" / "controllers"
        nested.mkdir(parents=True)

        path, data = find_package_json(nested)
        assert path.parent == tmp_project_dir.resolve()
        assert data["name"] == "parent"

    @pytest.mark.unit
    def test_nothing_found(self, tmp_project_dir: Path):
        with patch.object(Path, "is_file", return_value=False):
            assert find_package_json(tmp_project_dir) is None


class TestImportModule:
    @pytest.mark.unit
    def test_dotted_name(self, tmp_path: Path):
        (tmp_path / "settings.py").write_text("VALUE = 42\n", encoding="utf-8")
        module = import_module("settings", tmp_path)
        assert module.VALUE == 42

    @pytest.mark.unit
    def test_package(self, tmp_path: Path):
        package = tmp_path / "plugins"
        package.mkdir()
        (package / "__init__.py").write_text("NAME = 'plugins'\n", encoding="utf-8")
        module = import_module("plugins", tmp_path)
        assert module.NAME == "plugins"

    @pytest.mark.unit
    def test_relative_file_path(self, tmp_path: Path):
        (tmp_path / "conf").mkdir()
        (tmp_path / "conf" / "hooks.py").write_text("def hook():\n    return 'ok'\n", encoding="utf-8")
        module = import_module("conf/hooks.py", tmp_path)
        assert module.hook() == "ok"

    @pytest.mark.unit
    def test_missing_module(self, tmp_path: Path):
        with pytest.raises(ModuleNotFoundError):
            import_module("nope", tmp_path)


class TestEnsureDir:
    @pytest.mark.unit
    def test_creates_nested(self, tmp_path: Path):
        target = tmp_path / "a" / "b"
        result = ensure_dir(target)
        assert target.is_dir()
        assert result == target.resolve()

    @pytest.mark.unit
    def test_existing_dir(self, tmp_path: Path):
        assert ensure_dir(tmp_path) == tmp_path.resolve()


class TestFormatDuration:
    @pytest.mark.unit
    @pytest.mark.parametrize(
        "seconds,expected",
        [(3.7, "3.7s"), (65.2, "1m 5s"), (3661.0, "1h 1m 1s"), (-1, "0.0s")],
    )
    def test_format(self, seconds, expected):
        assert format_duration(seconds) == expected


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestOutputHelpers:
    @pytest.mark.unit
    def test_messages_go_through_console(self):
        with patch("tsed_cli.utils.console") as console_mock:
            print_success("done")
            print_error("failed")
            print_warning("careful")
        printed = [call.args[0] for call in console_mock.print.call_args_list]
        assert "[bold green]done[/bold green]" in printed
        assert "[bold red]failed[/bold red]" in printed
        assert "[bold yellow]careful[/bold yellow]" in printed

    @pytest.mark.unit
    def test_create_progress(self):
        progress = create_progress()
        assert progress.live.transient is True
        assert len(progress.columns) == 3
