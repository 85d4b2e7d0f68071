"""Command provider contract and the shared command execution flow."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..config import CliConfig
from ..manifest import ProjectPackageJson
from ..tasks import Task, TaskList, TaskResult
from .prompts import Question, ask


class CommandProvider:
    """A CLI command.

    ``prompt`` lists the questions to ask, ``map_context`` turns the answers
    into the rendering context, and ``exec`` returns the tasks to run.
    """

    name = ""

    def __init__(self, config: CliConfig, package_json: ProjectPackageJson) -> None:
        self.config = config
        self.package_json = package_json

    def prompt(self, initial: Mapping[str, Any]) -> list[Question]:
        return []

    def map_context(self, ctx: Mapping[str, Any]) -> dict[str, Any]:
        return dict(ctx)

    async def exec(self, ctx: dict[str, Any]) -> list[Task]:
        raise NotImplementedError


def install_task(config: CliConfig, package_json: ProjectPackageJson, *, silent: bool = False) -> Task:
    """Task running the package manager when the manifest has pending changes."""
    return Task(
        title="Install dependencies",
        task=lambda: package_json.install_tasks(config.install_options(silent=silent)),
        enabled=lambda: package_json.rewrite or package_json.reinstall,
    )


async def run_provider(
    provider: CommandProvider,
    initial: Mapping[str, Any] | None = None,
    *,
    interactive: bool = True,
    silent: bool = False,
) -> list[TaskResult]:
    """Prompt, map the context, then run the command's tasks and the install step."""
    answers = dict(initial or {})
    if interactive:
        answers = ask(provider.prompt(answers), answers)

    ctx = provider.map_context(answers)
    tasks = list(await provider.exec(ctx))
    tasks.append(install_task(provider.config, provider.package_json, silent=silent))

    return await TaskList(tasks, silent=silent).run()
