"""Interactive questions asked before a command runs.

Commands describe their questions declaratively; ``message``, ``default``,
``when`` and ``choices`` may be callables receiving the answers collected so
far, so a later question can depend on an earlier answer.  Questions whose
answer is already known (from the command line) are not asked again.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import questionary

from ..utils import TsedCliError

QUESTION_TYPES = ("input", "list", "autocomplete")


class PromptAbortedError(TsedCliError):
    """Raised when the user cancels a prompt (Ctrl-C)."""


@dataclass(frozen=True)
class Choice:
    name: str
    value: str


@dataclass
class Question:
    type: str
    name: str
    message: str | Callable[[dict[str, Any]], str]
    default: Any = None
    when: bool | Callable[[dict[str, Any]], bool] = True
    choices: list[Choice] | Callable[[dict[str, Any]], list[Choice]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.type not in QUESTION_TYPES:
            raise ValueError(f"Unsupported question type: {self.type!r}")


def _evaluate(value: Any, answers: dict[str, Any]) -> Any:
    return value(answers) if callable(value) else value


def _match_choice(answer: str, choices: list[Choice]) -> str:
    lowered = answer.strip().lower()
    for choice in choices:
        if lowered in (choice.name.lower(), choice.value.lower()):
            return choice.value
    return answer.strip()


def _prompt(question: Question, message: str, default: Any, choices: list[Choice]) -> Any:
    if question.type == "input":
        return questionary.text(message, default="" if default is None else str(default)).ask()

    if question.type == "list":
        values = [choice.value for choice in choices]
        return questionary.select(
            message,
            choices=[questionary.Choice(title=choice.name, value=choice.value) for choice in choices],
            default=default if default in values else None,
        ).ask()

    answer = questionary.autocomplete(
        message,
        choices=[choice.name for choice in choices],
        default="" if default is None else str(default),
        match_middle=True,
    ).ask()
    return None if answer is None else _match_choice(answer, choices)


def ask(questions: list[Question], answers: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Ask every applicable question and return the merged answers.

    Raises:
        PromptAbortedError: If the user cancels one of the prompts.
    """
    collected = dict(answers or {})
    for question in questions:
        if collected.get(question.name) not in (None, ""):
            continue
        if not _evaluate(question.when, collected):
            continue

        message = _evaluate(question.message, collected)
        default = _evaluate(question.default, collected)
        choices = _evaluate(question.choices, collected)

        value = _prompt(question, message, default, choices)
        if value is None:
            raise PromptAbortedError("Prompt cancelled by user")
        collected[question.name] = value

    return collected
