"""Shared utilities for CLI commands.

This module provides common utilities used across all command modules,
including console output, operator prompts, and error handling.
"""

from collections.abc import Callable
from typing import NoReturn

import typer
from rich.console import Console, ConsoleRenderable
from rich.panel import Panel

from src.utils.console_like import is_affirmative


class CLIConsole:
    """Rich console wrapper for consistent CLI output and operator prompts.

    Implements the ConsoleLike, ConfirmationPort and InputPort protocols
    used by the infrastructure workflows.
    """

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the CLI console."""
        self.console = console or Console()

    def print(self, msg: ConsoleRenderable | str | None = None) -> None:
        self.console.print(msg if msg is not None else "")

    def info(self, msg: str) -> None:
        self.console.print(f"[cyan]ℹ[/cyan]  {msg}")

    def ok(self, msg: str) -> None:
        self.console.print(f"[green]✅[/green] {msg}")

    def error(self, msg: str) -> None:
        self.console.print(f"[red]❌[/red] {msg}")

    def warn(self, msg: str) -> None:
        self.console.print(f"[yellow]⚠️[/yellow]  {msg}")

    def step(self, msg: str) -> None:
        self.console.print(f"[blue]==>[/blue] {msg}")

    def confirm(self, prompt: str) -> bool:
        """Ask a yes/no question; only `y` or `Y` confirms.

        Args:
            prompt: Question to display

        Returns:
            True if the operator answered y/Y, False otherwise
        """
        try:
            response = self.console.input(f"[bold]{prompt}[/bold] \\[y/N]: ")
            return is_affirmative(response)
        except EOFError:
            self.console.print("\n[dim]Cancelled.[/dim]")
            return False

    def ask(self, prompt: str) -> str:
        """Ask for free-text input; EOF counts as an empty answer."""
        try:
            return self.console.input(prompt)
        except EOFError:
            return ""

    def handle_error(
        self, message: str, details: str | None = None, exit_code: int = 1
    ) -> NoReturn:
        """Handle an error by printing a message and exiting.

        Args:
            message: Error message to display
            details: Optional additional details
            exit_code: Exit code to use
        """
        self.error(f"[bold red]{message}[/bold red]")
        if details:
            self.console.print(Panel(details, title="Details", border_style="red"))
        raise typer.Exit(exit_code)

    def print_header(self, title: str, style: str = "blue") -> None:
        """Print a styled header panel.

        Args:
            title: Header title text
            style: Border style color
        """
        self.console.print(
            Panel.fit(
                f"[bold {style}]{title}[/bold {style}]",
                border_style=style,
            )
        )

    def print_subheader(self, title: str) -> None:
        """Print a subheader.

        Args:
            title: Subheader title text
        """
        self.console.print(f"\n[bold underline]{title}[/bold underline]\n")


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Decorator to wrap command functions with standard error handling.

    Catches operation errors and formats them consistently. A declined
    confirmation exits cleanly with code 0.

    Args:
        func: The command function to wrap

    Returns:
        Wrapped function with error handling
    """
    from functools import wraps

    from src.infra.errors import OperationError

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except OperationError as e:
            if e.exit_code == 0:
                console.print(f"\n[dim]{e.message}[/dim]")
                raise typer.Exit(0) from None
            console.handle_error(e.message, e.details, exit_code=e.exit_code)
        except KeyboardInterrupt:
            console.print("\n[dim]Operation cancelled by user.[/dim]")
            raise typer.Exit(130) from None

    return wrapper


# Shared console instance for consistent output
console = CLIConsole()
