import pytest

from readme_footer.prompts import AutoPrompter, ConsolePrompter, Prompter

CHOICES = ["process", "skip", "archive"]


@pytest.fixture
def answers(monkeypatch):
    """Feed terminal input from a list."""
    queue = []
    monkeypatch.setattr("builtins.input", lambda *args: queue.pop(0))
    return queue


def test_prompter_is_abstract():
    with pytest.raises(TypeError):
        Prompter()


def test_console_confirm_uses_default_on_empty_input(answers, console):
    answers.extend(["", ""])
    prompter = ConsolePrompter(console)

    assert prompter.confirm("Overwrite?") is False
    assert prompter.confirm("Overwrite?", default=True) is True
    assert "Overwrite?" in console.file.getvalue()


def test_console_confirm_reads_answer(answers, console):
    answers.extend(["y", "n"])
    prompter = ConsolePrompter(console)

    assert prompter.confirm("Overwrite?") is True
    assert prompter.confirm("Overwrite?", default=True) is False


def test_console_choose(answers, console):
    answers.extend(["", "archive", "maybe", "process"])
    prompter = ConsolePrompter(console)

    assert prompter.choose("Process acme/widgets?", CHOICES, default="skip") == "skip"
    assert prompter.choose("Process acme/widgets?", CHOICES, default="skip") == "archive"
    assert prompter.choose("Process acme/widgets?", CHOICES, default="skip") == "process"
    assert answers == []


def test_auto_prompter_says_yes():
    prompter = AutoPrompter(assume_yes=True)

    assert prompter.confirm("Overwrite?") is True
    assert prompter.choose("Process?", CHOICES, default="skip") == "process"


def test_auto_prompter_uses_defaults():
    prompter = AutoPrompter(assume_yes=False)

    assert prompter.confirm("Overwrite?") is False
    assert prompter.confirm("Overwrite?", default=True) is True
    assert prompter.choose("Process?", CHOICES, default="skip") == "skip"
