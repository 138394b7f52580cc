"""Shared test doubles and fixtures.

ScriptedRunner stands in for CommandRunner: it records every command and
answers from rules registered by the test. ScriptedConsole records output
and replays canned operator answers.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from src.infra.config import OpsSettings
from src.infra.shell import ShellCommands
from src.infra.shell.types import CommandResult

__all__ = [
    "ScriptedRunner",
    "ScriptedConsole",
    "RecordedCall",
    "settings",
    "runner",
    "scripted_console",
    "project_dir",
    "commands",
]


@dataclass
class RecordedCall:
    cmd: list[str]
    cwd: Path | None
    capture_output: bool
    input_file: Path | None
    output_file: Path | None


@dataclass
class _Rule:
    tokens: tuple[str, ...]
    results: list[CommandResult]
    write: str | None = None


def _contains(cmd: Sequence[str], tokens: tuple[str, ...]) -> bool:
    size = len(tokens)
    return any(tuple(cmd[i : i + size]) == tokens for i in range(len(cmd) - size + 1))


class ScriptedRunner:
    """CommandRunner double driven by token rules.

    A rule matches when its tokens appear as a contiguous slice of the
    command. The most recently registered matching rule wins. Unmatched
    commands succeed with empty output.
    """

    def __init__(self, project_root: Path) -> None:
        self.project_root = project_root
        self.calls: list[RecordedCall] = []
        self.executables: set[str] = {"docker", "git"}
        self._rules: list[_Rule] = []

    def on(
        self,
        *tokens: str,
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
        results: list[CommandResult] | None = None,
        write: str | None = None,
    ) -> ScriptedRunner:
        """Register an answer for commands containing `tokens`.

        Args:
            results: Answers for successive calls; the last one repeats
            write: Text written to the call's output_file, if any
        """
        answers = results or [
            CommandResult(
                success=returncode == 0,
                stdout=stdout,
                stderr=stderr,
                returncode=returncode,
            )
        ]
        self._rules.append(_Rule(tokens=tokens, results=list(answers), write=write))
        return self

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        capture_output: bool = True,
        input_file: Path | None = None,
        output_file: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        self.calls.append(
            RecordedCall(
                cmd=list(cmd),
                cwd=cwd,
                capture_output=capture_output,
                input_file=input_file,
                output_file=output_file,
            )
        )
        for rule in reversed(self._rules):
            if _contains(cmd, rule.tokens):
                result = rule.results[0] if len(rule.results) == 1 else rule.results.pop(0)
                if output_file is not None:
                    output_file.write_text(rule.write or "")
                return result

        if output_file is not None:
            output_file.write_text("")
        return CommandResult(success=True)

    def which(self, executable: str) -> str | None:
        return f"/usr/bin/{executable}" if executable in self.executables else None

    def commands(self) -> list[list[str]]:
        return [call.cmd for call in self.calls]

    def called(self, *tokens: str) -> bool:
        return any(_contains(call.cmd, tokens) for call in self.calls)

    def find(self, *tokens: str) -> RecordedCall:
        for call in self.calls:
            if _contains(call.cmd, tokens):
                return call
        raise AssertionError(f"No call containing {tokens}; calls: {self.commands()}")


@dataclass
class ScriptedConsole:
    """Console double with canned confirmation and input answers."""

    confirmations: list[bool] = field(default_factory=list)
    answers: list[str] = field(default_factory=list)
    messages: list[tuple[str, object]] = field(default_factory=list)
    prompts: list[str] = field(default_factory=list)

    def print(self, msg: object = None) -> None:
        self.messages.append(("print", msg))

    def info(self, msg: str) -> None:
        self.messages.append(("info", msg))

    def warn(self, msg: str) -> None:
        self.messages.append(("warn", msg))

    def error(self, msg: str) -> None:
        self.messages.append(("error", msg))

    def ok(self, msg: str) -> None:
        self.messages.append(("ok", msg))

    def step(self, msg: str) -> None:
        self.messages.append(("step", msg))

    def confirm(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        return self.confirmations.pop(0) if self.confirmations else False

    def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answers.pop(0) if self.answers else ""

    def texts(self, kind: str | None = None) -> list[str]:
        return [str(msg) for k, msg in self.messages if kind is None or k == kind]


@pytest.fixture
def settings() -> OpsSettings:
    return OpsSettings()


@pytest.fixture
def project_dir(tmp_path: Path, settings: OpsSettings) -> Path:
    """A project directory with compose file, env file and a repo stub."""
    (tmp_path / settings.compose_file).write_text("services:\n  db:\n    image: postgres\n")
    (tmp_path / settings.env_file).write_text("POSTGRES_PASSWORD=secret\n")
    repo = tmp_path / settings.repo_path
    (repo / ".git").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def runner(project_dir: Path) -> ScriptedRunner:
    return ScriptedRunner(project_dir)


@pytest.fixture
def scripted_console() -> ScriptedConsole:
    return ScriptedConsole()


@pytest.fixture
def commands(
    project_dir: Path, settings: OpsSettings, runner: ScriptedRunner
) -> ShellCommands:
    return ShellCommands(project_dir, settings, runner=runner)  # type: ignore[arg-type]
