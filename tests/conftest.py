"""Shared pytest fixtures for the Ts.ED CLI test suite.

Provides reusable fixtures for:
- Temporary project directories (with or without a package.json)
- A CliConfig pointing at the temporary project
- A mocked CommandRunner recording every package manager call
- Mock subprocess helpers
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from tsed_cli.config import CliConfig
from tsed_cli.utils import CommandError, CommandResult


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Temporary directory for a generated project (auto-cleanup)."""
    project_dir = tmp_path / "test-project"
    project_dir.mkdir()
    yield project_dir


@pytest.fixture
def write_package_json():
    """Write a ``package.json`` into a directory.

    Usage:
        def test_read(write_package_json, tmp_project_dir):
            write_package_json(tmp_project_dir, {"name": "app"})
    """
    def factory(directory: Path, data: dict[str, Any]) -> Path:
        path = directory / "package.json"
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path

    return factory


@pytest.fixture
def config(tmp_project_dir: Path) -> CliConfig:
    """CliConfig rooted at the temporary project directory.

    Uses the ``init`` command so a missing ``package.json`` never resolves to
    a manifest outside the temporary directory.
    """
    return CliConfig(name="test-project", root_dir=tmp_project_dir, command="init")


# ---------------------------------------------------------------------------
# Process mocks
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_runner() -> MagicMock:
    """CommandRunner double.

    ``run`` is an ``AsyncMock`` returning a successful ``CommandResult``;
    ``run_sync`` (used by the ``yarn --version`` probe) succeeds as well.
    Set ``side_effect`` on either to simulate failures.
    """
    runner = MagicMock()
    runner.run = AsyncMock(
        side_effect=lambda cmd, args=(), cwd=None: CommandResult(cmd=[cmd, *args])
    )
    runner.run_sync = MagicMock(
        side_effect=lambda cmd, args=(), cwd=None: CommandResult(cmd=[cmd, *args], stdout="1.22.0")
    )
    return runner


@pytest.fixture
def missing_yarn(mock_runner: MagicMock) -> MagicMock:
    """``mock_runner`` whose ``yarn --version`` probe fails."""
    def probe(cmd: str, args=(), cwd=None) -> CommandResult:
        raise CommandError("Command not found: yarn", cmd=[cmd, *args], returncode=127)

    mock_runner.run_sync = MagicMock(side_effect=probe)
    return mock_runner


@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


@pytest.fixture
def runner_calls():
    """Flatten the ``run`` calls of a mocked runner to ``[cmd, *args]`` lists."""
    def collect(runner: MagicMock) -> list[list[str]]:
        return [[call.args[0], *call.args[1]] for call in runner.run.call_args_list]

    return collect
