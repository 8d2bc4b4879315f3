"""
Repository collaborator backed by the git executable.

Every operation shells out to ``git -C <workdir>`` and turns a failing
command into a RepositoryError carrying git's own message. Nothing is
cached: each call observes the repository as it is on disk.

Raw per-path status is exposed as a StatusFlag bitset parsed from
``git status --porcelain=v1 -z``. Mapping those bits onto display tags
is the status reporter's job.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from enum import IntFlag
from pathlib import Path
from typing import Optional, Union

from .errors import (
    DetachedHeadError,
    PushError,
    RemoteNotFoundError,
    RepositoryError,
    UnbornBranchError,
)

logger = logging.getLogger("dotvault.repo")


class StatusFlag(IntFlag):
    """Raw status bits for one path. CURRENT means clean and tracked."""

    CURRENT = 0
    INDEX_NEW = 1 << 0
    INDEX_MODIFIED = 1 << 1
    INDEX_DELETED = 1 << 2
    INDEX_RENAMED = 1 << 3
    INDEX_TYPECHANGE = 1 << 4
    WT_NEW = 1 << 7
    WT_MODIFIED = 1 << 8
    WT_DELETED = 1 << 9
    WT_TYPECHANGE = 1 << 10
    WT_RENAMED = 1 << 11
    IGNORED = 1 << 14
    CONFLICTED = 1 << 15


_INDEX_CODES = {
    "A": StatusFlag.INDEX_NEW,
    "C": StatusFlag.INDEX_NEW,
    "M": StatusFlag.INDEX_MODIFIED,
    "D": StatusFlag.INDEX_DELETED,
    "R": StatusFlag.INDEX_RENAMED,
    "T": StatusFlag.INDEX_TYPECHANGE,
}

_WORKTREE_CODES = {
    "A": StatusFlag.WT_NEW,
    "M": StatusFlag.WT_MODIFIED,
    "D": StatusFlag.WT_DELETED,
    "R": StatusFlag.WT_RENAMED,
    "T": StatusFlag.WT_TYPECHANGE,
}

_UNMERGED_CODES = {"DD", "AU", "UD", "UA", "DU", "AA", "UU"}


def parse_porcelain(output: str) -> dict[str, StatusFlag]:
    """Parse ``git status --porcelain=v1 -z`` output.

    Args:
        output: Raw NUL-separated status output.

    Returns:
        Mapping of repository-relative path to its status bits. Ignored or
        untracked directories keep git's trailing slash.
    """
    entries: dict[str, StatusFlag] = {}
    tokens = output.split("\0")
    i = 0
    while i < len(tokens):
        token = tokens[i]
        i += 1
        if len(token) < 4:
            continue

        code, path = token[:2], token[3:]
        if code == "??":
            flags = StatusFlag.WT_NEW
        elif code == "!!":
            flags = StatusFlag.IGNORED
        elif code in _UNMERGED_CODES:
            flags = StatusFlag.CONFLICTED
        else:
            flags = StatusFlag.CURRENT
            flags |= _INDEX_CODES.get(code[0], StatusFlag.CURRENT)
            flags |= _WORKTREE_CODES.get(code[1], StatusFlag.CURRENT)
            # Renames and copies are followed by the source path
            if code[0] in "RC":
                i += 1
        entries[path] = flags
    return entries


def lookup_status(
    entries: dict[str, StatusFlag], rel_path: Union[str, Path]
) -> StatusFlag:
    """Status bits of one path in a parsed status listing.

    Paths absent from the listing are clean and tracked. A path inside an
    ignored or untracked directory that git reported as ``dir/`` inherits
    the directory's bits.
    """
    rel = Path(rel_path).as_posix()
    if rel in entries:
        return entries[rel]
    for path, flags in entries.items():
        if path.endswith("/") and rel.startswith(path):
            return flags
    return StatusFlag.CURRENT


class Repository:
    """A git work tree whose top level is ``workdir``."""

    def __init__(self, workdir: Path):
        self.workdir = workdir

    @classmethod
    def open(cls, path: Union[str, Path]) -> Optional["Repository"]:
        """Open the repository rooted exactly at ``path``.

        Parent repositories are not discovered: a vault living somewhere
        inside another work tree is treated as having no repository.

        Returns:
            The repository, or None when ``path`` is not a work tree root
            or git is not installed.
        """
        root = Path(path).expanduser()
        if shutil.which("git") is None:
            logger.debug("git not found in PATH")
            return None

        result = subprocess.run(
            ["git", "-C", str(root), "rev-parse", "--show-toplevel"],
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            logger.debug("%s is not a git work tree", root)
            return None

        toplevel = Path(result.stdout.strip())
        if toplevel.resolve() != root.resolve():
            logger.debug("%s is inside %s, not a repository root", root, toplevel)
            return None
        return cls(root)

    def _run(self, *args: str, stdin: Optional[str] = None) -> str:
        """Run a git command and return its stdout.

        Raises:
            RepositoryError: If git exits non-zero or cannot be started.
        """
        cmd = ["git", "-C", str(self.workdir), *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                # Paths that are not valid UTF-8 decode the way os.fsdecode does
                errors="surrogateescape",
                check=True,
                input=stdin,
            )
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
            raise RepositoryError(f"git {args[0]} failed: {detail}") from exc
        except OSError as exc:
            raise RepositoryError(f"Cannot run git: {exc}") from exc
        return result.stdout

    def _try(self, *args: str) -> Optional[str]:
        """Run a git query, returning None instead of raising on failure."""
        try:
            return self._run(*args).strip()
        except RepositoryError as exc:
            logger.debug("%s", exc)
            return None

    @property
    def git_dir(self) -> Path:
        """Absolute location of the repository's ``.git`` directory."""
        return Path(self._run("rev-parse", "--absolute-git-dir").strip())

    # ----- HEAD -----

    def head_commit(self) -> str:
        """Commit id HEAD points at.

        Raises:
            UnbornBranchError: If HEAD has no commit yet.
        """
        commit = self._try("rev-parse", "--verify", "--quiet", "HEAD^{commit}")
        if not commit:
            raise UnbornBranchError("No HEAD commit found")
        return commit

    def current_branch(self) -> str:
        """Short name of the branch HEAD refers to.

        Raises:
            DetachedHeadError: If HEAD is detached.
        """
        branch = self._try("symbolic-ref", "--quiet", "--short", "HEAD")
        if not branch:
            raise DetachedHeadError("Cannot determine current branch: HEAD is detached")
        return branch

    def head_shorthand(self) -> Optional[str]:
        """Display name of HEAD: the branch, ``HEAD`` when detached, None when unborn."""
        if self._try("rev-parse", "--verify", "--quiet", "HEAD^{commit}") is None:
            return None
        return self._try("symbolic-ref", "--quiet", "--short", "HEAD") or "HEAD"

    # ----- status -----

    def statuses(self) -> dict[str, StatusFlag]:
        """Every path that differs from HEAD or the index.

        Untracked directories are expanded to their files. Ignored paths
        are not reported.
        """
        output = self._run("status", "--porcelain=v1", "-z", "--untracked-files=all")
        return parse_porcelain(output)

    def status_file(self, rel_path: Union[str, Path]) -> Optional[StatusFlag]:
        """Status bits for one path relative to the work tree.

        Returns:
            The flags, CURRENT for a clean tracked file, or None when the
            path is a directory and so has no single status entry.
        """
        rel = Path(rel_path).as_posix()
        full = self.workdir / rel
        if full.is_dir() and not full.is_symlink():
            return None
        return lookup_status(self.status_snapshot("--", f":(literal){rel}"), rel)

    def status_snapshot(self, *pathspec: str) -> dict[str, StatusFlag]:
        """Every non-clean path, ignored ones included, from one ``git status``.

        Look paths up with :func:`lookup_status`; clean tracked paths are
        absent from the result.
        """
        output = self._run(
            "status",
            "--porcelain=v1",
            "-z",
            "--untracked-files=all",
            "--ignored",
            *pathspec,
        )
        return parse_porcelain(output)

    # ----- index, tree and commit -----

    def add_all(self) -> None:
        """Stage new, modified and deleted paths and write the index to disk."""
        self._run("add", "--all")

    def write_tree(self) -> str:
        """Write the current index as a tree object and return its id."""
        return self._run("write-tree").strip()

    def commit(self, tree: str, parent: str, message: str) -> str:
        """Create a commit on top of ``parent`` and advance HEAD to it.

        Author and committer come from the repository's configured
        identity. HEAD is only moved if it still points at ``parent``.

        Returns:
            The new commit id.
        """
        commit_id = self._run("commit-tree", tree, "-p", parent, stdin=message).strip()
        first_line = message.splitlines()[0] if message else ""
        self._run("update-ref", "-m", f"commit: {first_line}", "HEAD", commit_id, parent)
        return commit_id

    # ----- remotes -----

    def find_remote(self, name: str) -> str:
        """URL of the named remote.

        Raises:
            RemoteNotFoundError: If no such remote is configured.
        """
        url = self._try("remote", "get-url", name)
        if url is None:
            raise RemoteNotFoundError(f"Remote '{name}' not found")
        return url

    def push(self, remote: str, refspec: str) -> None:
        """Push ``refspec`` to ``remote``. Never forced.

        Raises:
            PushError: If the push is rejected or the remote is unreachable.
        """
        try:
            self._run("push", remote, refspec)
        except RepositoryError as exc:
            raise PushError(f"Failed to push to {remote}: {exc}") from exc
