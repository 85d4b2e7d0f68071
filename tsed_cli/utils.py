"""Shared utility functions for the Ts.ED CLI.

Provides async and blocking command execution, the ``package.json`` lookup
used by the manifest model, module loading relative to a project directory,
and Rich-based console output.  Everything that touches a process or the
file system outside of the manifest itself goes through this module so the
rest of the package can be tested with a mocked :class:`CommandRunner`.
"""

from __future__ import annotations

import asyncio
import importlib.util
import json
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Sequence

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

console = Console()

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TsedCliError(Exception):
    """Base class for every error the CLI reports to the user."""


class CommandError(TsedCliError):
    """Raised when an external command exits with a non-zero status.

    The captured streams are kept on the instance so callers can inspect the
    tool's own diagnostics (e.g. to translate a known yarn failure).
    """

    def __init__(
        self,
        message: str,
        *,
        cmd: Sequence[str] = (),
        returncode: int = 1,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message)

    @classmethod
    def from_result(cls, result: "CommandResult") -> "CommandError":
        message = f"Command failed with exit code {result.returncode}: {result.command_line}"
        if result.stderr:
            message = f"{message}\n{result.stderr}"
        return cls(
            message,
            cmd=result.cmd,
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )


# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(argv: Sequence[str], cwd: str | Path | None = None) -> tuple[int, str, str]:
    """Run *argv* without a shell and wait for it to exit.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple with both streams decoded
        and stripped.
    """
    process = await asyncio.create_subprocess_exec(
        *argv,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd else None,
    )
    stdout_bytes, stderr_bytes = await process.communicate()
    return (
        process.returncode or 0,
        (stdout_bytes or b"").decode("utf-8", errors="replace").strip(),
        (stderr_bytes or b"").decode("utf-8", errors="replace").strip(),
    )


@dataclass
class CommandResult:
    """Outcome of a finished external command."""

    cmd: list[str]
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""

    @property
    def command_line(self) -> str:
        return " ".join(self.cmd)

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Process-execution collaborator used by the manifest and its tasks.

    ``run`` is awaited by tasks; ``run_sync`` exists for quick probes such as
    ``yarn --version`` that happen before any task list is built.  Both raise
    :class:`CommandError` on a non-zero exit or when the binary is missing.
    """

    async def run(
        self,
        cmd: str,
        args: Sequence[str] = (),
        cwd: str | Path | None = None,
    ) -> CommandResult:
        argv = [cmd, *args]
        try:
            returncode, stdout, stderr = await run_command(argv, cwd=cwd)
        except FileNotFoundError as exc:
            raise CommandError(
                f"Command not found: {cmd}", cmd=argv, returncode=127, stderr=str(exc)
            ) from exc

        result = CommandResult(cmd=argv, returncode=returncode, stdout=stdout, stderr=stderr)
        if not result.ok:
            raise CommandError.from_result(result)
        return result

    def run_sync(
        self,
        cmd: str,
        args: Sequence[str] = (),
        cwd: str | Path | None = None,
    ) -> CommandResult:
        argv = [cmd, *args]
        try:
            completed = subprocess.run(
                argv,
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as exc:
            raise CommandError(
                f"Command not found: {cmd}", cmd=argv, returncode=127, stderr=str(exc)
            ) from exc

        result = CommandResult(
            cmd=argv,
            returncode=completed.returncode,
            stdout=(completed.stdout or "").strip(),
            stderr=(completed.stderr or "").strip(),
        )
        if not result.ok:
            raise CommandError.from_result(result)
        return result


# ---------------------------------------------------------------------------
# JSON / file-system helpers
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    file_path = Path(path)
    raw = file_path.read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        return {"_root": data}
    return data


def find_package_json(cwd: str | Path) -> tuple[Path, dict[str, Any]] | None:
    """Find the closest ``package.json`` starting at *cwd* and walking up.

    Returns:
        ``(path, parsed_content)`` for the first file found, or ``None`` when
        no ancestor directory holds one.
    """
    start = Path(cwd).expanduser().resolve()
    for directory in (start, *start.parents):
        candidate = directory / "package.json"
        if candidate.is_file():
            return candidate, load_json(candidate)
    return None


def import_module(name: str, base_dir: str | Path) -> ModuleType:
    """Load a Python module that lives inside a project directory.

    *name* may be a dotted module name (``config.settings``), a relative file
    path (``config/settings.py``) or an absolute path.  Packages are resolved
    through their ``__init__.py``.

    Raises:
        ModuleNotFoundError: If nothing matching *name* exists under *base_dir*.
    """
    base = Path(base_dir)
    raw = Path(name)
    if raw.suffix == ".py":
        candidates = [raw if raw.is_absolute() else base / raw]
    else:
        relative = Path(*name.split("."))
        candidates = [base / relative.with_suffix(".py"), base / relative / "__init__.py"]

    for candidate in candidates:
        if candidate.is_file():
            module_name = f"_tsed_project_{candidate.with_suffix('').name}"
            spec = importlib.util.spec_from_file_location(module_name, candidate)
            if spec is None or spec.loader is None:
                continue
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            spec.loader.exec_module(module)
            return module

    raise ModuleNotFoundError(f"Cannot find module '{name}' in {base}")


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist.

    Returns:
        The resolved ``Path`` object.
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path.resolve()


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
        format_duration(3661.0) -> "1h 1m 1s"
    """
    if seconds < 0:
        return "0.0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = seconds % 60

    parts: list[str] = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")

    if hours > 0 or minutes > 0:
        parts.append(f"{int(secs)}s")
    else:
        parts.append(f"{secs:.1f}s")

    return " ".join(parts)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def create_progress() -> Progress:
    """Create a Rich progress display configured for task lists.

    Returns:
        A ``Progress`` instance suitable for use as a context manager.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
