"""Task list orchestration.

Commands describe their work as a list of :class:`Task` descriptors (render a
file, write ``package.json``, run the package manager, ...).  A
:class:`TaskList` runs them in declared order, or concurrently when asked,
and reports progress on the shared Rich console.

Predicates are closures evaluated when the task is reached, not when the list
is built, so a task sees every change made by the tasks that ran before it::

    tasks = TaskList([
        Task("Write package.json", pkg.write, enabled=lambda: pkg.rewrite),
        Task("Install", install, skip=lambda: not pkg.reinstall),
    ])
    await tasks.run()

A task callable may return a plain value, an awaitable, an async iterator of
output lines (shown as sub-progress), or a list of tasks / a ``TaskList``
that is run as nested sub-steps.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from rich.markup import escape
from rich.progress import Progress, TaskID

from .utils import TsedCliError, console, create_progress


class TaskStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class Task:
    """Declarative description of one step."""

    title: str
    task: Callable[[], Any]
    skip: Callable[[], Any] | None = None
    enabled: Callable[[], Any] | None = None


@dataclass
class TaskResult:
    """What happened to a task that was not disabled."""

    title: str
    status: TaskStatus
    skip_reason: str = ""
    error: BaseException | None = None
    value: Any = None
    output: list[str] = field(default_factory=list)
    subtasks: list["TaskResult"] = field(default_factory=list)


class TaskListError(TsedCliError):
    """Raised once at the end of a list run with ``exit_on_error=False``."""

    def __init__(self, errors: list[BaseException], results: list[TaskResult] | None = None) -> None:
        self.errors = errors
        self.results = results or []
        lines = "\n".join(f"  - {error}" for error in errors)
        super().__init__(f"{len(errors)} task(s) failed:\n{lines}")


class TaskList:
    """Runs a list of :class:`Task` descriptors.

    Parameters
    ----------
    tasks:
        Descriptors, run in the given order.
    concurrent:
        Run the enabled tasks at the same time.  Must stay ``False`` whenever
        a task depends on the outcome of a previous one.
    exit_on_error:
        When ``True`` the first failure propagates unchanged and the remaining
        tasks are not started.  When ``False`` every task runs and the
        failures are raised together as a :class:`TaskListError`.
    silent:
        Disable all console output.
    """

    def __init__(
        self,
        tasks: Iterable[Task],
        *,
        concurrent: bool = False,
        exit_on_error: bool = True,
        silent: bool = False,
    ) -> None:
        self.tasks = list(tasks)
        self.concurrent = concurrent
        self.exit_on_error = exit_on_error
        self.silent = silent
        self._level = 0
        self._progress: Progress | None = None

    def __len__(self) -> int:
        return len(self.tasks)

    def add(self, *tasks: Task) -> "TaskList":
        self.tasks.extend(tasks)
        return self

    # -- Public API ----------------------------------------------------------

    async def run(self) -> list[TaskResult]:
        """Run the list and return the result of every enabled task."""
        if self.silent or self._progress is not None:
            return await self._run_all()

        with create_progress() as progress:
            self._progress = progress
            try:
                return await self._run_all()
            finally:
                self._progress = None

    # -- Execution -----------------------------------------------------------

    async def _run_all(self) -> list[TaskResult]:
        if self.concurrent:
            return await self._run_concurrent()

        results: list[TaskResult] = []
        errors: list[BaseException] = []
        for task in self.tasks:
            try:
                result = await self._run_task(task)
            except Exception as exc:
                if self.exit_on_error:
                    raise
                errors.append(exc)
                results.append(TaskResult(task.title, TaskStatus.FAILED, error=exc))
                continue
            if result is not None:
                results.append(result)

        if errors:
            raise TaskListError(errors, results)
        return results

    async def _run_concurrent(self) -> list[TaskResult]:
        running = [asyncio.ensure_future(self._run_task(task)) for task in self.tasks]
        if not running:
            return []

        if self.exit_on_error:
            done, pending = await asyncio.wait(running, return_when=asyncio.FIRST_EXCEPTION)
            failed = [future for future in running if future in done and future.exception()]
            if failed:
                for future in pending:
                    future.cancel()
                await asyncio.gather(*pending, return_exceptions=True)
                raise failed[0].exception()
            outcomes = [future.result() for future in running]
        else:
            outcomes = await asyncio.gather(*running, return_exceptions=True)

        results: list[TaskResult] = []
        errors: list[BaseException] = []
        for task, outcome in zip(self.tasks, outcomes):
            if isinstance(outcome, BaseException):
                errors.append(outcome)
                results.append(TaskResult(task.title, TaskStatus.FAILED, error=outcome))
            elif outcome is not None:
                results.append(outcome)

        if errors:
            raise TaskListError(errors, results)
        return results

    async def _run_task(self, task: Task) -> TaskResult | None:
        if task.enabled is not None and not await _resolve(task.enabled()):
            return None

        reason = await _resolve(task.skip()) if task.skip is not None else None
        if reason:
            skip_reason = reason if isinstance(reason, str) else ""
            detail = f"skipped: {skip_reason}" if skip_reason else "skipped"
            self._report("[yellow]↓[/yellow]", task.title, f" [dim]\\[{escape(detail)}][/dim]")
            return TaskResult(task.title, TaskStatus.SKIPPED, skip_reason=skip_reason)

        result = TaskResult(task.title, TaskStatus.COMPLETED)
        row = self._start_row(task.title)
        try:
            value = await _resolve(task.task())

            if isinstance(value, list) and value and all(isinstance(item, Task) for item in value):
                value = TaskList(
                    value,
                    concurrent=self.concurrent,
                    exit_on_error=self.exit_on_error,
                    silent=self.silent,
                )

            if isinstance(value, TaskList):
                self._stop_row(row)
                row = None
                self._report("[cyan]❯[/cyan]", task.title)
                result.subtasks = await self._run_nested(value)
            elif hasattr(value, "__aiter__"):
                async for line in value:
                    result.output.append(str(line))
                    self._update_row(row, task.title, str(line))
            else:
                result.value = value
        except Exception as exc:
            self._stop_row(row)
            first_line = str(exc).splitlines()[0] if str(exc) else type(exc).__name__
            self._report("[red]✖[/red]", task.title, f" [red]{escape(first_line)}[/red]")
            raise

        self._stop_row(row)
        if not result.subtasks:
            self._report("[green]✔[/green]", task.title)
        return result

    async def _run_nested(self, nested: "TaskList") -> list[TaskResult]:
        nested._level = self._level + 1
        nested._progress = self._progress
        nested.silent = nested.silent or self.silent
        return await nested.run()

    # -- Progress reporting --------------------------------------------------

    def _report(self, symbol: str, title: str, suffix: str = "") -> None:
        if self.silent:
            return
        indent = "  " * self._level
        console.print(f"{indent}{symbol} {escape(title)}{suffix}")

    def _start_row(self, title: str) -> TaskID | None:
        if self.silent or self._progress is None:
            return None
        return self._progress.add_task("  " * self._level + escape(title), total=None)

    def _update_row(self, row: TaskID | None, title: str, line: str) -> None:
        if row is None or self._progress is None:
            return
        self._progress.update(
            row, description=f"{'  ' * self._level}{escape(title)} [dim]› {escape(line)}[/dim]"
        )

    def _stop_row(self, row: TaskID | None) -> None:
        if row is None or self._progress is None:
            return
        self._progress.remove_task(row)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def create_tasks(tasks: Iterable[Task], **options: Any) -> TaskList:
    """Build a :class:`TaskList`; *options* are the ``TaskList`` keyword arguments."""
    return TaskList(tasks, **options)


async def run_tasks(tasks: Iterable[Task], **options: Any) -> list[TaskResult]:
    """Build and run a :class:`TaskList` in one call."""
    return await create_tasks(tasks, **options).run()
