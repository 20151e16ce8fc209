"""Small terminal prompts (menu, checkbox, text input) built on rich."""

from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.prompt import Prompt


console = Console()


@dataclass
class Choice:
    """One option of a menu or checkbox list."""

    name: str
    value: Any
    checked: bool = False


def parse_selection(answer: str, count: int) -> list[int]:
    """
    Turn an answer like "1, 3-5" into zero-based indexes.

    Numbers outside 1..count are ignored; order follows the answer and
    repeated numbers are kept once.

    Examples:
        >>> parse_selection("1, 3-4", 5)
        [0, 2, 3]
        >>> parse_selection("9, x", 3)
        []

    """
    indexes: list[int] = []
    for raw_part in answer.split(","):
        part = raw_part.strip()
        if not part:
            continue
        start, _, end = part.partition("-")
        if not start.strip().isdigit() or (end and not end.strip().isdigit()):
            continue
        first = int(start)
        last = int(end) if end else first
        for number in range(first, last + 1):
            if 1 <= number <= count and number - 1 not in indexes:
                indexes.append(number - 1)
    return indexes


def select(message: str, choices: list[Choice]) -> Any:  # noqa: ANN401
    """Show a numbered menu and return the value of the picked choice."""
    for number, choice in enumerate(choices, start=1):
        console.print(f"  [bold]{number}[/bold]. {choice.name}")
    numbers = [str(number) for number in range(1, len(choices) + 1)]
    answer = Prompt.ask(message, choices=numbers, show_choices=False, console=console)
    return choices[int(answer) - 1].value


def checkbox(message: str, choices: list[Choice]) -> list[Any]:
    """
    Show a numbered list with the pre-checked entries marked.

    The user answers with numbers and ranges ("1,3-4"); an empty answer keeps
    the pre-checked entries.
    """
    for number, choice in enumerate(choices, start=1):
        mark = "x" if choice.checked else " "
        console.print(f"  \\[{mark}] [bold]{number}[/bold]. {choice.name}")
    answer = Prompt.ask(
        f"{message} (numbers or ranges, Enter keeps [x])",
        default="",
        show_default=False,
        console=console,
    )
    if not answer.strip():
        return [choice.value for choice in choices if choice.checked]
    return [choices[index].value for index in parse_selection(answer, len(choices))]


def text(message: str, default: str = "") -> str:
    return Prompt.ask(message, default=default, show_default=bool(default), console=console)
