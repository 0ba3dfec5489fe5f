"""Interactive prompt abstraction.

The release tool is human-gated: the caretaker confirms status-check
overrides, picks the action to run and confirms each merge attempt.
``TyperPrompt`` asks on the terminal; ``MockPrompt`` replays scripted
answers in tests.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

import typer

from .console import ConsoleProtocol, Style

__all__ = ["Choice", "PromptProtocol", "TyperPrompt", "MockPrompt"]

T = TypeVar("T")
V = TypeVar("V")


@dataclass(frozen=True, slots=True)
class Choice(Generic[T]):
    label: str
    value: T


class PromptProtocol(Protocol):
    def confirm(self, message: str, *, default: bool = False) -> bool: ...

    def select(self, message: str, choices: Sequence[Choice[V]]) -> V: ...

    def input(self, message: str, *, default: str = "") -> str: ...


class TyperPrompt:
    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    def confirm(self, message: str, *, default: bool = False) -> bool:
        return typer.confirm(message, default=default)

    def select(self, message: str, choices: Sequence[Choice[V]]) -> V:
        if not choices:
            raise ValueError("select() needs at least one choice")

        self._console.print(message, Style.BOLD)
        for i, choice in enumerate(choices, start=1):
            self._console.print(f"{i:2}. {choice.label}")

        while True:
            raw = typer.prompt("Pick a number", default="1")
            try:
                idx = int(raw)
            except ValueError:
                self._console.error("invalid number")
                continue
            if idx < 1 or idx > len(choices):
                self._console.error("out of range")
                continue
            return choices[idx - 1].value

    def input(self, message: str, *, default: str = "") -> str:
        return str(typer.prompt(message, default=default))


def _empty_answers() -> list[object]:
    return []


def _empty_asked() -> list[str]:
    return []


@dataclass
class MockPrompt:
    """Scripted prompt for tests.

    ``answers`` are consumed in order. Booleans answer ``confirm``; for
    ``select`` an ``int`` picks by index and any other value must equal the
    label of a choice.
    """

    answers: list[object] = field(default_factory=_empty_answers)
    asked: list[str] = field(default_factory=_empty_asked)

    def _next(self, message: str) -> object:
        self.asked.append(message)
        if not self.answers:
            raise AssertionError(f"unexpected prompt: {message}")
        return self.answers.pop(0)

    def confirm(self, message: str, *, default: bool = False) -> bool:
        del default
        answer = self._next(message)
        if not isinstance(answer, bool):
            raise AssertionError(f"expected bool answer for: {message}")
        return answer

    def select(self, message: str, choices: Sequence[Choice[V]]) -> V:
        answer = self._next(message)
        if isinstance(answer, int) and not isinstance(answer, bool):
            return choices[answer].value
        for choice in choices:
            if choice.label == answer:
                return choice.value
        raise AssertionError(f"no choice labelled {answer!r} for: {message}")

    def input(self, message: str, *, default: str = "") -> str:
        answer = self._next(message)
        return default if answer is None else str(answer)
