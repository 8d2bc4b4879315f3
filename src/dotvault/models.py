"""
Pydantic models describing the vault, its files and operation results.

Nothing here is persisted. Every value is recomputed from the
filesystem and the repository on each command.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class StatusKind(str, Enum):
    """Version-control status of a single vault path."""

    STAGED_NEW = "staged-new"
    STAGED_MODIFIED = "staged-modified"
    STAGED_DELETED = "staged-deleted"
    UNSTAGED_NEW = "unstaged-new"
    UNSTAGED_MODIFIED = "unstaged-modified"
    UNSTAGED_DELETED = "unstaged-deleted"
    IGNORED = "ignored"
    OTHER_TRACKED = "other-tracked"


class TrackedFile(BaseModel):
    """A file or directory found while walking a configuration.

    Attributes:
        path: Absolute path inside the vault.
        relative_path: Path relative to the vault root (the repository key).
        name: Path relative to the owning configuration, for display.
        status: Status tag, or None when no repository is attached or the
            path is a directory.
    """

    path: Path
    relative_path: Path
    name: str
    status: Optional[StatusKind] = None


class ConfigurationState(str, Enum):
    """Whether a configuration holds any files."""

    EMPTY = "empty"
    POPULATED = "populated"


class ConfigurationReport(BaseModel):
    """Status walk result for one configuration directory."""

    name: str
    path: Path
    state: ConfigurationState
    files: list[TrackedFile] = Field(default_factory=list)


class RelocationState(str, Enum):
    """Where a single relocation ended up.

    LINKED is the only fully moved state. UNTOUCHED means a failure
    happened before anything on disk changed. The remaining failure
    states describe what is left on disk and have to be repaired by hand.
    """

    SKIPPED = "skipped"
    UNTOUCHED = "untouched"
    LINKED = "linked"
    PARTIAL_COPY = "partial-copy"
    ORIGINAL_NOT_REMOVED = "original-not-removed"
    MOVED_NOT_LINKED = "moved-not-linked"


class RelocationResult(BaseModel):
    """Outcome of relocating one input path.

    Attributes:
        source: The path as given by the user.
        destination: Location of the content inside the vault.
        link: Canonical original location where the symlink lives
            (None when the path was skipped before resolution).
        state: Final relocation state.
    """

    source: Path
    destination: Path
    link: Optional[Path] = None
    state: RelocationState


class SyncOutcome(str, Enum):
    """Terminal state of a sync invocation."""

    NO_CHANGES = "no-changes"
    COMMITTED = "committed"
    PUSHED = "pushed"


class SyncResult(BaseModel):
    """Result of SyncEngine.sync."""

    outcome: SyncOutcome
    commit_id: Optional[str] = None
    branch: Optional[str] = None

    @property
    def short_id(self) -> Optional[str]:
        """First 7 hex characters of the commit id."""
        return self.commit_id[:7] if self.commit_id else None

    @property
    def pushed(self) -> bool:
        return self.outcome == SyncOutcome.PUSHED
