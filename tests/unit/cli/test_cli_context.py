"""Tests for CLI context dependency injection."""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest
import typer

from src.cli.context import CLIContext, build_cli_context, get_cli_context
from src.infra.config import OpsSettings


def _context(**overrides):
    fields = dict(
        console=Mock(),
        project_root=Path("/test"),
        settings=OpsSettings(),
        commands=Mock(),
        constants=Mock(),
    )
    fields.update(overrides)
    return CLIContext(**fields)


def test_cli_context_is_immutable():
    """Test that CLIContext is frozen/immutable."""
    ctx = _context()

    with pytest.raises(AttributeError):
        ctx.console = Mock()  # type: ignore[misc]


def test_build_cli_context_uses_explicit_project_dir(tmp_path):
    ctx = build_cli_context(tmp_path)

    assert ctx.project_root == tmp_path.resolve()
    assert ctx.commands.project_root == tmp_path.resolve()
    assert ctx.commands.git.repo_path == tmp_path.resolve() / "twenty"
    assert ctx.settings == OpsSettings()


def test_build_cli_context_reads_project_dir_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("TWENTY_OPS_PROJECT_DIR", str(tmp_path))

    ctx = build_cli_context()

    assert ctx.project_root == tmp_path.resolve()


def test_build_cli_context_applies_settings_file(tmp_path):
    (tmp_path / "twenty-ops.yaml").write_text("config:\n  repo_path: vendor/twenty\n")

    ctx = build_cli_context(tmp_path)

    assert ctx.settings.repo_path == "vendor/twenty"
    assert ctx.commands.git.repo_path == tmp_path.resolve() / "vendor" / "twenty"


def test_build_cli_context_invalid_settings_exits(tmp_path):
    (tmp_path / "twenty-ops.yaml").write_text("nothing: here\n")

    with pytest.raises(typer.Exit) as excinfo:
        build_cli_context(tmp_path)

    assert excinfo.value.exit_code == 1


@patch("src.cli.context.ShellCommands")
@patch("src.cli.context.get_project_root")
def test_cli_context_shell_commands_initialized_with_project_root(
    mock_get_root, mock_shell_commands, tmp_path
):
    """Test that ShellCommands is initialized with project_root and settings."""
    mock_get_root.return_value = tmp_path

    ctx = build_cli_context()

    mock_shell_commands.assert_called_once_with(tmp_path, ctx.settings)


def test_get_cli_context_from_typer_context():
    """Test that get_cli_context retrieves from Typer context."""
    mock_ctx_obj = _context()
    typer_ctx = Mock(spec=typer.Context)
    typer_ctx.obj = mock_ctx_obj

    result = get_cli_context(typer_ctx)

    assert result is mock_ctx_obj


def test_get_cli_context_with_invalid_obj_falls_back():
    """Test that get_cli_context falls back when ctx.obj is not CLIContext."""
    typer_ctx = Mock(spec=typer.Context)
    typer_ctx.obj = "invalid"

    with patch("src.cli.context.build_cli_context") as mock_build:
        mock_build.return_value = Mock(spec=CLIContext)

        get_cli_context(typer_ctx)

        mock_build.assert_called_once()


@patch("click.get_current_context")
def test_get_cli_context_uses_click_context_as_fallback(mock_get_click_ctx):
    """Test that get_cli_context uses click context when typer ctx is None."""
    mock_ctx_obj = _context()
    mock_click_context = Mock()
    mock_click_context.obj = mock_ctx_obj
    mock_get_click_ctx.return_value = mock_click_context

    result = get_cli_context(None)

    assert result is mock_ctx_obj
    mock_get_click_ctx.assert_called_once_with(silent=True)
