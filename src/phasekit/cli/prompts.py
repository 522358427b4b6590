"""Interactive yes/no confirmation gate.

Answers are matched leniently: case-insensitive, full word or first
letter.  Only an answer matching the non-default word departs from the
default; an empty or unrecognised answer counts as the default.
"""

from __future__ import annotations

from typing import Any

from phasekit.exceptions import AnswerDeclinedError, EnvironmentError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def answer_matches(actual: str, expected: str) -> bool:
    """Return ``True`` if *actual* is *expected* or its first letter."""
    actual_lc = actual.lower()
    expected_lc = expected.lower()
    return actual_lc in (expected_lc, expected_lc[:1])


def answer_options(defaults_to_yes: bool) -> str:
    """Return the ``[Y/n]`` / ``[y/N]`` suffix, default capitalised."""
    return "[Y/n]" if defaults_to_yes else "[y/N]"


async def ask_question(question: str) -> str:
    """Prompt for one line of free text and return it.

    Raises
    ------
    KeyboardInterrupt
        If the user presses Ctrl+C at the prompt.
    """
    questionary = _import_questionary()
    answer: str = await questionary.text(question, qmark="").unsafe_ask_async()
    return answer or ""


def is_affirmative(answer: str, defaults_to_yes: bool = False) -> bool:
    """Interpret *answer* to a yes/no question with the given default."""
    non_default_answer = "no" if defaults_to_yes else "yes"
    gave_non_default_answer = answer_matches(answer, non_default_answer)
    return gave_non_default_answer != defaults_to_yes


async def ask_yes_or_no_question(question: str, defaults_to_yes: bool = False) -> None:
    """Ask *question*; return on "yes", raise on "no".

    Raises
    ------
    AnswerDeclinedError
        If the answer (after applying the default) is negative.
    """
    answer = await ask_question(f"{question} {answer_options(defaults_to_yes)}:")
    if not is_affirmative(answer, defaults_to_yes):
        raise AnswerDeclinedError(f"Declined: {question}")
