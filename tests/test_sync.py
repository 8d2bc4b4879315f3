"""
Tests for the sync engine -- stage, commit and push the vault.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from conftest import git, init_repo, write_undecodable
from dotvault.errors import (
    DetachedHeadError,
    NoRepositoryError,
    PushError,
    RemoteNotFoundError,
    UnbornBranchError,
)
from dotvault.models import SyncOutcome
from dotvault.repo import Repository
from dotvault.sync import SyncEngine


def _head(repo_dir: Path) -> str:
    return git(repo_dir, "rev-parse", "HEAD").strip()


def _commit_message(repo_dir: Path, rev: str = "HEAD") -> str:
    raw = git(repo_dir, "cat-file", "commit", rev)
    return raw.split("\n\n", 1)[1]


def _engine(repo_dir: Path) -> SyncEngine:
    repo = Repository.open(repo_dir)
    assert repo is not None
    return SyncEngine(repo)


class TestSyncCommit:
    """Committing pending changes."""

    def test_no_repository(self):
        """Syncing without a repository is an error."""
        with pytest.raises(NoRepositoryError, match="GIT repo not found"):
            SyncEngine(None).sync()

    def test_no_changes_creates_no_commit(self, git_vault: Path):
        """A clean repository is a no-op."""
        before = _head(git_vault)

        result = _engine(git_vault).sync()

        assert result.outcome == SyncOutcome.NO_CHANGES
        assert result.commit_id is None
        assert _head(git_vault) == before

    def test_ignored_files_are_not_changes(self, git_vault: Path):
        """Only ignored files differing is still a no-op."""
        (git_vault / "zsh" / "debug.log").write_text("x\n")
        before = _head(git_vault)

        assert _engine(git_vault).sync().outcome == SyncOutcome.NO_CHANGES
        assert _head(git_vault) == before

    def test_single_modified_file(self, git_vault: Path):
        """One modified file yields one commit touching only that file."""
        before = _head(git_vault)
        (git_vault / "zsh" / ".zshrc").write_text("export EDITOR=vim\n")

        result = _engine(git_vault).sync()

        assert result.outcome == SyncOutcome.COMMITTED
        assert result.commit_id == _head(git_vault)
        assert result.short_id == result.commit_id[:7]
        assert result.branch == "main"
        assert not result.pushed
        assert git(git_vault, "rev-parse", "HEAD^").strip() == before
        changed = git(git_vault, "diff-tree", "--no-commit-id", "--name-only", "-r", "HEAD")
        assert changed.split() == ["zsh/.zshrc"]
        assert _commit_message(git_vault) == "Sync dotfiles"

    def test_new_and_deleted_files_are_staged(self, git_vault: Path):
        """Additions and deletions land in the same commit."""
        (git_vault / "zsh" / ".zshrc").unlink()
        (git_vault / "tmux").mkdir()
        (git_vault / "tmux" / ".tmux.conf").write_text("set -g mouse on\n")

        _engine(git_vault).sync()

        changed = git(git_vault, "diff-tree", "--no-commit-id", "--name-status", "-r", "HEAD")
        assert sorted(changed.splitlines()) == ["A\ttmux/.tmux.conf", "D\tzsh/.zshrc"]
        assert git(git_vault, "status", "--porcelain") == ""

    def test_commit_uses_configured_identity(self, git_vault: Path):
        (git_vault / "zsh" / ".zshrc").write_text("x\n")

        _engine(git_vault).sync()

        author = git(git_vault, "log", "-1", "--format=%an <%ae>|%cn <%ce>").strip()
        assert author == "Test User <test@dotvault.local>|Test User <test@dotvault.local>"

    def test_unborn_branch_is_rejected(self, unborn_vault: Path):
        """The first commit cannot be made by a sync; the index is untouched."""
        (unborn_vault / "zsh").mkdir()
        (unborn_vault / "zsh" / ".zshrc").write_text("x\n")

        with pytest.raises(UnbornBranchError):
            _engine(unborn_vault).sync()

        assert git(unborn_vault, "ls-files") == ""

    def test_file_name_not_valid_utf8(self, git_vault: Path):
        """Names that are not valid UTF-8 are committed byte for byte."""
        write_undecodable(git_vault / "zsh")

        result = _engine(git_vault).sync()

        assert result.outcome == SyncOutcome.COMMITTED
        tracked = subprocess.run(
            ["git", "-C", str(git_vault), "ls-files", "-z"],
            capture_output=True,
            check=True,
        ).stdout
        assert b"zsh/caf\xe9" in tracked.split(b"\0")
        assert Repository.open(git_vault).statuses() == {}


class TestSyncPush:
    """Pushing after the commit."""

    def test_push_without_origin(self, git_vault: Path):
        """Missing origin fails after the commit, refs otherwise unchanged."""
        before = _head(git_vault)
        (git_vault / "zsh" / ".zshrc").write_text("x\n")

        with pytest.raises(RemoteNotFoundError, match="Remote 'origin' not found"):
            _engine(git_vault).sync(push=True)

        assert git(git_vault, "rev-parse", "HEAD^").strip() == before
        assert _commit_message(git_vault) == "Sync dotfiles"
        assert git(git_vault, "branch", "--format=%(refname:short)").split() == ["main"]

    def test_push_to_origin(self, git_vault: Path, bare_remote: Path):
        """The branch is pushed to the same name on origin."""
        git(git_vault, "remote", "add", "origin", str(bare_remote))
        (git_vault / "zsh" / ".zshrc").write_text("x\n")

        result = _engine(git_vault).sync(push=True)

        assert result.outcome == SyncOutcome.PUSHED
        assert result.pushed
        assert result.branch == "main"
        assert git(bare_remote, "rev-parse", "refs/heads/main").strip() == result.commit_id

    def test_detached_head_cannot_push(self, git_vault: Path, bare_remote: Path):
        git(git_vault, "remote", "add", "origin", str(bare_remote))
        git(git_vault, "checkout", "--quiet", "--detach")
        (git_vault / "zsh" / ".zshrc").write_text("x\n")

        with pytest.raises(DetachedHeadError):
            _engine(git_vault).sync(push=True)

    def test_rejected_push(self, tmp_path: Path, git_vault: Path, bare_remote: Path):
        """A non-fast-forward push surfaces as a PushError."""
        git(git_vault, "remote", "add", "origin", str(bare_remote))
        git(git_vault, "push", "--quiet", "origin", "main")

        other = tmp_path / "other"
        git(tmp_path, "clone", "--quiet", str(bare_remote), str(other))
        init_repo(other)
        git(other, "checkout", "--quiet", "-B", "main", "origin/main")
        (other / "zsh" / ".zshrc").write_text("from another machine\n")
        git(other, "commit", "--quiet", "-am", "Diverge")
        git(other, "push", "--quiet", "origin", "main")

        (git_vault / "zsh" / ".zshrc").write_text("local change\n")

        with pytest.raises(PushError, match="Failed to push to origin"):
            _engine(git_vault).sync(push=True)
