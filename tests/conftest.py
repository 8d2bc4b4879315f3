"""Shared test fixtures for dotvault."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from pathlib import Path

import pytest


def git(cwd: Path, *args: str) -> str:
    """Run git in ``cwd`` and return its stdout."""
    result = subprocess.run(
        ["git", "-C", str(cwd), *args],
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


def write_undecodable(directory: Path, content: bytes = b"x\n") -> str:
    """Create a file whose name is not valid UTF-8 and return its decoded name."""
    raw_name = b"caf\xe9"
    if sys.getfilesystemencoding().lower() not in ("utf-8", "utf8"):
        pytest.skip("filesystem encoding is not UTF-8")
    try:
        with open(os.path.join(os.fsencode(directory), raw_name), "wb") as fh:
            fh.write(content)
    except OSError:
        pytest.skip("filesystem rejects names that are not valid UTF-8")
    return os.fsdecode(raw_name)


def init_repo(path: Path) -> Path:
    """Initialise ``path`` as a repository on ``main`` with a local identity."""
    git(path, "init", "--quiet")
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    git(path, "config", "user.name", "Test User")
    git(path, "config", "user.email", "test@dotvault.local")
    git(path, "config", "commit.gpgsign", "false")
    return path


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """An empty vault directory."""
    vault_dir = tmp_path / "vault"
    vault_dir.mkdir()
    return vault_dir


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A fake home directory that is also the current directory."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.chdir(home_dir)
    return home_dir


@pytest.fixture
def unborn_vault(vault: Path) -> Path:
    """A vault that is a git repository without any commit."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    return init_repo(vault)


@pytest.fixture
def git_vault(unborn_vault: Path) -> Path:
    """A vault repository with one configuration and an initial commit."""
    vault_dir = unborn_vault
    (vault_dir / "zsh").mkdir()
    (vault_dir / "zsh" / ".zshrc").write_text("export EDITOR=nvim\n")
    (vault_dir / ".gitignore").write_text("*.log\n")
    git(vault_dir, "add", "--all")
    git(vault_dir, "commit", "--quiet", "-m", "Initial commit")
    return vault_dir


@pytest.fixture
def bare_remote(tmp_path: Path) -> Path:
    """A bare repository to push to."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    remote = tmp_path / "remote.git"
    remote.mkdir()
    git(remote, "init", "--bare", "--quiet")
    return remote
