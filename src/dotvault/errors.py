"""
Exception taxonomy for dotvault.

Every error raised by the core derives from DotvaultError so the CLI
can report it once and exit non-zero.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import RelocationResult


class DotvaultError(Exception):
    """Base class for all dotvault errors."""


class ConfigurationError(DotvaultError):
    """Raised when the vault root or the settings file is unusable."""


class ValidationError(DotvaultError):
    """Raised when an input path is rejected before relocation."""


class VaultReadError(DotvaultError):
    """Raised when the vault root cannot be listed."""


class RelocationError(DotvaultError):
    """Raised when moving or linking a path fails.

    Attributes:
        result: The failing item. Its state tells which phase broke.
        completed: Items relocated earlier in the same batch. They stay
            relocated.
    """

    def __init__(
        self,
        message: str,
        result: "RelocationResult",
        completed: Optional[list["RelocationResult"]] = None,
    ):
        super().__init__(message)
        self.result = result
        self.completed = completed or []


class RepositoryError(DotvaultError):
    """Raised when a git operation fails."""


class NoRepositoryError(RepositoryError):
    """Raised when the vault is not a git repository."""


class UnbornBranchError(RepositoryError):
    """Raised when HEAD does not point at a commit yet."""


class DetachedHeadError(RepositoryError):
    """Raised when HEAD is not a symbolic branch reference."""


class RemoteNotFoundError(RepositoryError):
    """Raised when a named remote is not configured."""


class PushError(RepositoryError):
    """Raised when the remote rejects a push or cannot be reached."""
