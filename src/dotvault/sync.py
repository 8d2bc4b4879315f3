"""
Sync Engine -- commit every pending vault change as one commit.

    no repository      ->  NoRepositoryError
    nothing changed    ->  NO_CHANGES, no commit
    changes            ->  stage all -> write tree -> commit -> (push)

The commit message is fixed and the parent is always the current HEAD
commit, so an unborn branch cannot be synced. Pushing sends the current
branch to the same-named branch on ``origin`` without forcing.
"""

from __future__ import annotations

import logging
from typing import Optional

from . import SYNC_MESSAGE
from .errors import NoRepositoryError
from .models import SyncOutcome, SyncResult
from .repo import Repository

logger = logging.getLogger("dotvault.sync")

REMOTE_NAME = "origin"


class SyncEngine:
    """Stages, commits and optionally pushes the vault repository."""

    def __init__(self, repo: Optional[Repository]):
        self.repo = repo

    def _require_repo(self) -> Repository:
        if self.repo is None:
            raise NoRepositoryError("GIT repo not found")
        return self.repo

    def sync(self, push: bool = False) -> SyncResult:
        """Commit all pending changes and optionally push them.

        Args:
            push: Push the current branch to ``origin`` after committing.

        Returns:
            SyncResult describing what happened.

        Raises:
            NoRepositoryError: If the vault has no repository.
            UnbornBranchError: If HEAD has no commit yet.
            DetachedHeadError: If pushing with a detached HEAD.
            RemoteNotFoundError: If pushing without an ``origin`` remote.
            PushError: If the remote rejects the push.
        """
        repo = self._require_repo()

        changes = repo.statuses()
        if not changes:
            logger.info("No changes to sync")
            return SyncResult(outcome=SyncOutcome.NO_CHANGES)

        # Resolved before staging so an unborn branch leaves the index alone
        parent = repo.head_commit()

        logger.info("Adding %d changed path(s) to the index", len(changes))
        repo.add_all()
        tree = repo.write_tree()
        commit_id = repo.commit(tree, parent, SYNC_MESSAGE)
        logger.info("Committed changes: %s", commit_id[:7])

        if not push:
            return SyncResult(
                outcome=SyncOutcome.COMMITTED,
                commit_id=commit_id,
                branch=repo.head_shorthand(),
            )

        branch = self.push_current_branch()
        return SyncResult(outcome=SyncOutcome.PUSHED, commit_id=commit_id, branch=branch)

    def push_current_branch(self) -> str:
        """Push the branch HEAD refers to onto the same name at ``origin``.

        Returns:
            The pushed branch name.
        """
        repo = self._require_repo()
        branch = repo.current_branch()
        repo.find_remote(REMOTE_NAME)

        logger.info("Pushing %s to %s", branch, REMOTE_NAME)
        repo.push(REMOTE_NAME, f"refs/heads/{branch}")
        logger.info("Pushed to remote")
        return branch
