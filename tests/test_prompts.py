"""Tests for flowboost.ui.prompts.TerminalPrompter."""

import pytest

from flowboost.errors import UserAborted
from flowboost.models.choices import ConfirmChoice, DirtyChangesChoice, OutOfSyncChoice
from flowboost.ui.prompts import TerminalPrompter


def feed(monkeypatch, *answers):
    """Answer successive input() calls; EOFError once exhausted."""
    remaining = list(answers)

    def fake_input(prompt=""):
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    monkeypatch.setattr("builtins.input", fake_input)
    return remaining


OPTIONS = {
    OutOfSyncChoice.FORCE: "Force push",
    OutOfSyncChoice.ABORT: "Abort",
}


class TestChoose:
    def test_by_number(self, monkeypatch):
        feed(monkeypatch, "1")
        assert TerminalPrompter().choose(OPTIONS, "Out of sync") is OutOfSyncChoice.FORCE

    def test_by_key(self, monkeypatch):
        feed(monkeypatch, "abort")
        assert TerminalPrompter().choose(OPTIONS) is OutOfSyncChoice.ABORT

    def test_invalid_then_valid(self, monkeypatch, capsys):
        feed(monkeypatch, "7", "nonsense", "2")
        assert TerminalPrompter().choose(OPTIONS) is OutOfSyncChoice.ABORT
        assert capsys.readouterr().out.count("Enter a number between 1 and 2") == 2

    def test_eof_returns_safe_default(self, monkeypatch):
        feed(monkeypatch)
        choice = TerminalPrompter().choose(
            {DirtyChangesChoice.RESET_SERVER: "Reset", DirtyChangesChoice.ABORT: "Abort"}
        )
        assert choice is DirtyChangesChoice.ABORT

    def test_lists_labels_and_keys(self, monkeypatch, capsys):
        feed(monkeypatch, "2")
        TerminalPrompter().choose(OPTIONS, "What now?")
        out = capsys.readouterr().out
        assert "What now?" in out
        assert "1. Force push" in out
        assert "(abort)" in out

    def test_empty_options_rejected(self):
        with pytest.raises(ValueError):
            TerminalPrompter().choose({})


class TestConfirm:
    def test_yes(self, monkeypatch):
        feed(monkeypatch, "yes")
        assert TerminalPrompter().confirm("Continue?") is True

    def test_eof_means_no(self, monkeypatch):
        feed(monkeypatch)
        assert TerminalPrompter().confirm("Continue?") is False

    def test_custom_labels(self, monkeypatch, capsys):
        feed(monkeypatch, "2")
        assert TerminalPrompter().confirm("Go?", "Do it", "Leave it") is False
        assert "Leave it" in capsys.readouterr().out


class TestPick:
    def test_by_number_or_name(self, monkeypatch):
        feed(monkeypatch, "2", "feature")
        prompter = TerminalPrompter()
        assert prompter.pick(["feature", "hotfix"], "Type?") == "hotfix"
        assert prompter.pick(["feature", "hotfix"], "Type?") == "feature"

    def test_eof_aborts(self, monkeypatch):
        feed(monkeypatch)
        with pytest.raises(UserAborted):
            TerminalPrompter().pick(["feature"], "Type?")


class TestAskText:
    def test_returns_stripped_answer(self, monkeypatch):
        feed(monkeypatch, "  fix login  ")
        assert TerminalPrompter().ask_text("Message:") == "fix login"

    def test_empty_reprompts(self, monkeypatch, capsys):
        feed(monkeypatch, "", "ok")
        assert TerminalPrompter().ask_text("Message:") == "ok"
        assert "A value is required." in capsys.readouterr().out

    def test_pattern_reprompts(self, monkeypatch, capsys):
        feed(monkeypatch, "eng12", "ENG-12")
        assert TerminalPrompter().ask_text("Ticket:", r"^[A-Z]+-\d+$") == "ENG-12"
        assert "does not match the required format" in capsys.readouterr().out

    def test_eof_aborts(self, monkeypatch):
        feed(monkeypatch)
        with pytest.raises(UserAborted):
            TerminalPrompter().ask_text("Message:")

    def test_secret_read_without_echo(self, monkeypatch):
        feed(monkeypatch)
        prompts = []
        monkeypatch.setattr(
            "flowboost.ui.prompts.getpass.getpass",
            lambda prompt="": prompts.append(prompt) or "  s3cret  ",
        )
        assert TerminalPrompter().ask_text("Secret:", secret=True) == "s3cret"
        assert "Secret:" in prompts[0]

    def test_secret_not_shown_on_mismatch(self, monkeypatch, capsys):
        answers = ["bad", "ok-1"]
        monkeypatch.setattr(
            "flowboost.ui.prompts.getpass.getpass", lambda prompt="": answers.pop(0)
        )
        assert TerminalPrompter().ask_text("Secret:", r"-\d$", secret=True) == "ok-1"
        assert "bad" not in capsys.readouterr().out


def test_confirm_choice_keys():
    assert ConfirmChoice.from_key("yes") is ConfirmChoice.YES
