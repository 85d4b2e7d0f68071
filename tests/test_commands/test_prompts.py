"""Unit tests for the question layer (tsed_cli.commands.prompts)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from tsed_cli.commands.prompts import Choice, PromptAbortedError, Question, ask

CHOICES = [Choice("Controller", "controller"), Choice("Service (Injectable)", "service")]


def _answer(value):
    prompt = MagicMock()
    prompt.ask.return_value = value
    return prompt


class TestQuestion:
    @pytest.mark.unit
    def test_rejects_unknown_type(self):
        with pytest.raises(ValueError, match="checkbox"):
            Question(type="checkbox", name="x", message="?")


class TestAsk:
    @pytest.mark.unit
    def test_input(self):
        with patch("tsed_cli.commands.prompts.questionary") as q:
            q.text.return_value = _answer("Calendar")
            answers = ask([Question(type="input", name="name", message="Which name ?", default="Service")])

        assert answers == {"name": "Calendar"}
        q.text.assert_called_once_with("Which name ?", default="Service")

    @pytest.mark.unit
    def test_list_passes_choices(self):
        with patch("tsed_cli.commands.prompts.questionary") as q:
            q.select.return_value = _answer("koa")
            answers = ask(
                [
                    Question(
                        type="list",
                        name="platform",
                        message="Which platform:",
                        default="express",
                        choices=[Choice("Express.js", "express"), Choice("Koa.js", "koa")],
                    )
                ]
            )

        assert answers["platform"] == "koa"
        kwargs = q.select.call_args.kwargs
        assert kwargs["default"] == "express"
        assert len(kwargs["choices"]) == 2

    @pytest.mark.unit
    def test_autocomplete_maps_name_to_value(self):
        with patch("tsed_cli.commands.prompts.questionary") as q:
            q.autocomplete.return_value = _answer("Service (Injectable)")
            answers = ask([Question(type="autocomplete", name="type", message="Type?", choices=CHOICES)])

        assert answers["type"] == "service"
        assert q.autocomplete.call_args.kwargs["match_middle"] is True

    @pytest.mark.unit
    def test_autocomplete_accepts_free_text(self):
        with patch("tsed_cli.commands.prompts.questionary") as q:
            q.autocomplete.return_value = _answer(" Controller ")
            answers = ask([Question(type="autocomplete", name="type", message="Type?", choices=CHOICES)])
        assert answers["type"] == "controller"

    @pytest.mark.unit
    def test_skips_answered_and_disabled_questions(self):
        questions = [
            Question(type="input", name="name", message="Name?"),
            Question(type="input", name="route", message="Route?", when=False),
        ]
        with patch("tsed_cli.commands.prompts.questionary") as q:
            answers = ask(questions, {"name": "User"})

        assert answers == {"name": "User"}
        q.text.assert_not_called()

    @pytest.mark.unit
    def test_callables_receive_previous_answers(self):
        questions = [
            Question(type="input", name="type", message="Type?"),
            Question(
                type="input",
                name="route",
                message=lambda state: f"Route of the {state['type']}?",
                default=lambda state: f"/{state['type']}",
                when=lambda state: state["type"] == "controller",
            ),
        ]
        with patch("tsed_cli.commands.prompts.questionary") as q:
            q.text.side_effect = [_answer("controller"), _answer("/users")]
            answers = ask(questions)

        assert answers == {"type": "controller", "route": "/users"}
        q.text.assert_called_with("Route of the controller?", default="/controller")

    @pytest.mark.unit
    def test_cancel_raises(self):
        with patch("tsed_cli.commands.prompts.questionary") as q:
            q.text.return_value = _answer(None)
            with pytest.raises(PromptAbortedError):
                ask([Question(type="input", name="name", message="Name?")])
