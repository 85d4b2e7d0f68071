"""CLI commands.

Every command is a :class:`CommandProvider`: it declares its questions,
maps the answers to a context and returns the tasks to run.
:func:`run_provider` drives that flow and appends the dependency install
step whenever the command left ``package.json`` dirty.
"""

from tsed_cli.commands.base import CommandProvider, install_task, run_provider
from tsed_cli.commands.generate import GenerateCommand, UnknownProviderError
from tsed_cli.commands.init import InitCommand
from tsed_cli.commands.packages import AddCommand, RunCommand, parse_package
from tsed_cli.commands.prompts import Choice, PromptAbortedError, Question, ask

__all__ = [
    "AddCommand",
    "Choice",
    "CommandProvider",
    "GenerateCommand",
    "InitCommand",
    "PromptAbortedError",
    "Question",
    "RunCommand",
    "UnknownProviderError",
    "ask",
    "install_task",
    "parse_package",
    "run_provider",
]
