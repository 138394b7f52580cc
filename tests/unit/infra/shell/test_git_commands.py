"""Tests for GitCommands."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from src.infra.shell.git import GitCommands
from src.infra.shell.types import CommandResult

REPO = Path("/srv/stack/twenty")


def _ok(stdout: str = "") -> CommandResult:
    return CommandResult(success=True, stdout=stdout)


def _fail(stderr: str = "", returncode: int = 1) -> CommandResult:
    return CommandResult(success=False, stderr=stderr, returncode=returncode)


@pytest.fixture
def mock_runner():
    runner = Mock()
    runner.run.return_value = _ok()
    return runner


@pytest.fixture
def git(mock_runner) -> GitCommands:
    return GitCommands(mock_runner, REPO)


def test_every_command_runs_inside_the_repository(git, mock_runner):
    """Test that commands get the repository as cwd instead of changing directory."""
    git.stage_all()
    git.fetch_all_tags()
    git.checkout("v1.2.0")

    for call in mock_runner.run.call_args_list:
        assert call.kwargs["cwd"] == REPO
        assert call.args[0][0] == "git"


def test_get_status_clean_repository(git, mock_runner):
    mock_runner.run.side_effect = [_ok(""), _ok("1a2b3c4d\n")]

    status = git.get_status()

    assert status.is_git_repo is True
    assert status.is_clean is True
    assert status.short_sha == "1a2b3c4d"
    first_cmd = mock_runner.run.call_args_list[0].args[0]
    assert first_cmd == ["git", "status", "--porcelain"]


def test_get_status_dirty_repository(git, mock_runner):
    mock_runner.run.side_effect = [_ok(" M README.md\n?? new.txt\n"), _ok("1a2b3c4d")]

    status = git.get_status()

    assert status.is_clean is False
    assert status.porcelain == " M README.md\n?? new.txt"


def test_get_status_outside_repository(git, mock_runner):
    mock_runner.run.return_value = _fail("fatal: not a git repository", 128)

    status = git.get_status()

    assert status.is_git_repo is False
    assert status.is_clean is False
    assert status.short_sha is None


def test_has_uncommitted_changes_uses_diff_index(git, mock_runner):
    mock_runner.run.return_value = _fail()

    assert git.has_uncommitted_changes() is True
    assert mock_runner.run.call_args.args[0] == [
        "git",
        "diff-index",
        "--quiet",
        "HEAD",
        "--",
    ]


def test_file_listings_drop_blank_lines(git, mock_runner):
    mock_runner.run.return_value = _ok("a.ts\n\nb.ts\n")

    assert git.changed_files() == ["a.ts", "b.ts"]
    assert git.untracked_files() == ["a.ts", "b.ts"]


def test_write_staged_diff_redirects_to_file(git, mock_runner, tmp_path):
    target = tmp_path / "changes.patch"

    git.write_staged_diff(target)

    call = mock_runner.run.call_args
    assert call.args[0] == ["git", "diff", "--cached"]
    assert call.kwargs["output_file"] == target


def test_snapshot_index_returns_tree_sha(git, mock_runner):
    mock_runner.run.return_value = _ok("4b825dc642cb6eb9a060e54bf8d69288fbee4904\n")

    assert git.snapshot_index() == "4b825dc642cb6eb9a060e54bf8d69288fbee4904"
    assert mock_runner.run.call_args.args[0] == ["git", "write-tree"]


def test_snapshot_index_failure_returns_none(git, mock_runner):
    mock_runner.run.return_value = _fail("error: unmerged paths")

    assert git.snapshot_index() is None


def test_restore_index_reads_tree(git, mock_runner):
    git.restore_index("abc123")

    assert mock_runner.run.call_args.args[0] == ["git", "read-tree", "abc123"]


def test_revert_commands(git, mock_runner):
    git.unstage_all()
    git.discard_tracked_changes()
    git.clean_untracked()

    cmds = [call.args[0] for call in mock_runner.run.call_args_list]
    assert cmds == [
        ["git", "reset", "HEAD", "."],
        ["git", "checkout", "--", "."],
        ["git", "clean", "-fd"],
    ]


def test_current_tag_none_when_not_on_tag(git, mock_runner):
    mock_runner.run.return_value = _fail("fatal: no tag exactly matches", 128)

    assert git.current_tag() is None


def test_current_tag_exact_match(git, mock_runner):
    mock_runner.run.return_value = _ok("v0.30.0\n")

    assert git.current_tag() == "v0.30.0"
    assert mock_runner.run.call_args.args[0] == [
        "git",
        "describe",
        "--tags",
        "--exact-match",
        "HEAD",
    ]


def test_list_tags_newest_first_applies_limit(git, mock_runner):
    mock_runner.run.return_value = _ok("v3\nv2\n\nv1\nv0\n")

    assert git.list_tags_newest_first(3) == ["v3", "v2", "v1"]
    assert mock_runner.run.call_args.args[0] == ["git", "tag", "-l", "--sort=-creatordate"]


def test_tag_date_unknown_on_failure(git, mock_runner):
    mock_runner.run.return_value = _fail()

    assert git.tag_date("v9") is None


def test_tag_date(git, mock_runner):
    mock_runner.run.return_value = _ok("2024-05-01 10:00:00 +0200\n")

    assert git.tag_date("v1") == "2024-05-01 10:00:00 +0200"
    assert mock_runner.run.call_args.args[0] == ["git", "log", "-1", "--format=%ai", "v1"]


def test_pull_uses_remote_and_branch(git, mock_runner):
    git.pull("origin", "main")

    assert mock_runner.run.call_args.args[0] == ["git", "pull", "origin", "main"]


def test_patch_application_variants(git, mock_runner):
    patch_file = Path("/srv/stack/changes.patch")

    git.apply_check(patch_file)
    git.apply(patch_file)
    git.apply_three_way(patch_file)

    cmds = [call.args[0] for call in mock_runner.run.call_args_list]
    assert cmds == [
        ["git", "apply", "--check", str(patch_file)],
        ["git", "apply", str(patch_file)],
        ["git", "apply", "--3way", str(patch_file)],
    ]


def test_list_tags_newest_first_without_limit(git, mock_runner):
    mock_runner.run.return_value = _ok("v3\nv2\nv1\n")

    assert git.list_tags_newest_first() == ["v3", "v2", "v1"]
