from __future__ import annotations

from typing import Protocol

from rich import print as rich_print
from rich.console import ConsoleRenderable


class ConsoleLike(Protocol):
    def print(self, msg: ConsoleRenderable | str | None = None) -> None: ...

    def info(self, msg: str) -> None: ...

    def warn(self, msg: str) -> None: ...

    def error(self, msg: str) -> None: ...

    def ok(self, msg: str) -> None: ...

    def step(self, msg: str) -> None: ...


class ConfirmationPort(Protocol):
    """Blocking yes/no question to the operator."""

    def confirm(self, prompt: str) -> bool: ...


class InputPort(Protocol):
    """Blocking free-text question to the operator."""

    def ask(self, prompt: str) -> str: ...


class OperatorConsole(ConsoleLike, ConfirmationPort, InputPort, Protocol):
    """Everything an interactive workflow needs from its console."""


def is_affirmative(response: str) -> bool:
    """Only a single `y` or `Y` counts as consent."""
    return response.strip() in ("y", "Y")


class StdoutConsole:
    """Minimal console fallback.

    Keeps infrastructure code usable without importing the CLI console.
    Output goes through rich, so markup and tables still render.
    """

    def print(self, msg: ConsoleRenderable | str | None = None) -> None:
        rich_print(msg if msg is not None else "")

    def info(self, msg: str) -> None:
        rich_print(msg)

    def warn(self, msg: str) -> None:
        rich_print(msg)

    def error(self, msg: str) -> None:
        rich_print(msg)

    def ok(self, msg: str) -> None:
        rich_print(msg)

    def step(self, msg: str) -> None:
        rich_print(f"==> {msg}")

    def confirm(self, prompt: str) -> bool:
        try:
            return is_affirmative(input(f"{prompt} (y/N): "))
        except EOFError:
            return False

    def ask(self, prompt: str) -> str:
        try:
            return input(prompt)
        except EOFError:
            return ""


def coalesce_console(console: OperatorConsole | None) -> OperatorConsole:
    return console if console is not None else StdoutConsole()
