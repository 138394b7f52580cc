"""Patch extraction against a real git repository."""

import shutil
import subprocess
from pathlib import Path

import pytest
from typer.testing import CliRunner

from src.cli import app
from src.infra.config import OpsSettings
from src.infra.errors import ExternalCommandFailed
from src.infra.patch import PatchExtractor
from src.infra.shell import ShellCommands

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed"),
]


def _git(repo: Path, *args: str) -> str:
    completed = subprocess.run(
        ["git", "-c", "user.email=ops@example.com", "-c", "user.name=Ops", *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout


@pytest.fixture
def repo_project(tmp_path: Path) -> Path:
    """Project directory whose `twenty` checkout has one commit."""
    repo = tmp_path / "twenty"
    repo.mkdir()
    _git(repo, "init", "--quiet")
    (repo / "README.md").write_text("hello\n")
    (repo / "obsolete.txt").write_text("remove me\n")
    _git(repo, "add", "README.md", "obsolete.txt")
    _git(repo, "commit", "--quiet", "-m", "initial")
    return tmp_path


@pytest.fixture
def extractor(repo_project: Path) -> PatchExtractor:
    settings = OpsSettings()
    return PatchExtractor(ShellCommands(repo_project, settings), settings)


def test_clean_repository_produces_no_patch(extractor, repo_project):
    result = extractor.extract()

    assert result.path is None
    assert not (repo_project / "patch-twenty-changes.patch").exists()


def test_patch_covers_every_kind_of_change(extractor, repo_project):
    repo = repo_project / "twenty"
    (repo / "README.md").write_text("hello world\n")
    (repo / "obsolete.txt").unlink()
    (repo / "staged.txt").write_text("staged\n")
    _git(repo, "add", "staged.txt")
    (repo / "untracked.txt").write_text("new\n")

    result = extractor.extract()

    patch_text = result.path.read_text()
    assert "+hello world" in patch_text
    assert "deleted file mode" in patch_text
    assert "b/staged.txt" in patch_text
    assert "b/untracked.txt" in patch_text


def test_index_partition_is_preserved(extractor, repo_project):
    repo = repo_project / "twenty"
    (repo / "README.md").write_text("hello world\n")
    (repo / "staged.txt").write_text("staged\n")
    _git(repo, "add", "staged.txt")
    (repo / "untracked.txt").write_text("new\n")
    before = _git(repo, "status", "--porcelain")

    extractor.extract()

    assert _git(repo, "status", "--porcelain") == before


def test_extraction_is_idempotent(extractor, repo_project):
    repo = repo_project / "twenty"
    (repo / "README.md").write_text("hello world\n")
    (repo / "untracked.txt").write_text("new\n")

    first = extractor.extract().path.read_bytes()
    second = extractor.extract().path.read_bytes()

    assert first == second


def test_patch_applies_to_pristine_checkout(extractor, repo_project):
    repo = repo_project / "twenty"
    (repo / "README.md").write_text("hello world\n")
    (repo / "untracked.txt").write_text("new\n")
    patch_path = extractor.extract().path

    _git(repo, "reset", "--hard", "--quiet")
    _git(repo, "clean", "-fd", "--quiet")
    _git(repo, "apply", str(patch_path))

    assert (repo / "README.md").read_text() == "hello world\n"
    assert (repo / "untracked.txt").read_text() == "new\n"


def test_output_in_missing_directory_fails_cleanly(extractor, repo_project):
    repo = repo_project / "twenty"
    (repo / "README.md").write_text("hello world\n")
    before = _git(repo, "status", "--porcelain")

    with pytest.raises(ExternalCommandFailed, match="Failed to create patch file"):
        extractor.extract("nodir/out.patch")

    assert _git(repo, "status", "--porcelain") == before
    assert not (repo_project / "nodir").exists()


def test_cli_reports_missing_output_directory(repo_project):
    (repo_project / "twenty" / "README.md").write_text("hello world\n")

    result = CliRunner().invoke(
        app, ["-C", str(repo_project), "patch-extract", "nodir/out.patch"]
    )

    assert result.exit_code == 1
    assert "Failed to create patch file" in result.output
