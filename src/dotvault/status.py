"""
Status walk: cross-reference the vault's file tree with git status.

Configurations are the vault's direct, non-hidden subdirectories,
reported in byte-wise name order. Each one is walked recursively and
every entry below its root is annotated with a StatusKind.

Unreadable directories below a configuration are skipped with a
warning rather than failing the report: a home directory tree often
contains entries the user cannot read. Failing to list the vault root
itself is fatal.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from . import HIDDEN_PREFIX
from .errors import VaultReadError
from .models import ConfigurationReport, ConfigurationState, StatusKind, TrackedFile
from .repo import Repository, StatusFlag, lookup_status

logger = logging.getLogger("dotvault.status")

# Checked in order; the first matching bit wins
_PRECEDENCE: list[tuple[StatusFlag, StatusKind]] = [
    (StatusFlag.INDEX_NEW, StatusKind.STAGED_NEW),
    (StatusFlag.INDEX_MODIFIED, StatusKind.STAGED_MODIFIED),
    (StatusFlag.INDEX_DELETED, StatusKind.STAGED_DELETED),
    (StatusFlag.WT_NEW, StatusKind.UNSTAGED_NEW),
    (StatusFlag.WT_MODIFIED, StatusKind.UNSTAGED_MODIFIED),
    (StatusFlag.WT_DELETED, StatusKind.UNSTAGED_DELETED),
    (StatusFlag.IGNORED, StatusKind.IGNORED),
]


def map_status(flags: StatusFlag) -> StatusKind:
    """Map raw status bits to exactly one StatusKind.

    Index bits take precedence over work tree bits, and IGNORED over the
    OTHER_TRACKED fallback (clean, renamed, type-changed, conflicted).
    """
    for flag, kind in _PRECEDENCE:
        if flags & flag:
            return kind
    return StatusKind.OTHER_TRACKED


def list_configurations(vault_root: Path) -> list[tuple[str, Path]]:
    """Direct non-hidden subdirectories of the vault, sorted by name bytes.

    Raises:
        VaultReadError: If the vault root cannot be listed.
    """
    try:
        with os.scandir(vault_root) as it:
            entries = list(it)
    except OSError as exc:
        raise VaultReadError(f"Failed to read {vault_root}: {exc}") from exc

    confs = []
    for entry in entries:
        if entry.name.startswith(HIDDEN_PREFIX):
            continue
        try:
            if not entry.is_dir():
                continue
        except OSError as exc:
            logger.warning("Skipping unreadable entry %s: %s", entry.path, exc)
            continue
        confs.append((entry.name, Path(entry.path)))

    confs.sort(key=lambda conf: os.fsencode(conf[0]))
    return confs


def _skip_unreadable(exc: OSError) -> None:
    logger.warning("Skipping unreadable entry %s: %s", exc.filename, exc.strerror)


def walk_configuration(
    vault_root: Path,
    conf_path: Path,
    statuses: Optional[dict[str, StatusFlag]] = None,
) -> list[TrackedFile]:
    """Every file and directory below ``conf_path``, sorted by relative path.

    The configuration root itself is not included. Symlinks are reported
    but not followed. ``statuses`` is a repository status snapshot; without
    one every status is None.
    """
    found: list[Path] = []
    for root, dirs, files in os.walk(conf_path, onerror=_skip_unreadable):
        found.extend(Path(root) / name for name in dirs)
        found.extend(Path(root) / name for name in files)
    found.sort(key=lambda p: os.fsencode(p.relative_to(vault_root)))

    tracked = []
    for path in found:
        rel_path = path.relative_to(vault_root)
        status = None
        # Directories have no single status entry
        if statuses is not None and not (path.is_dir() and not path.is_symlink()):
            status = map_status(lookup_status(statuses, rel_path))
        tracked.append(
            TrackedFile(
                path=path,
                relative_path=rel_path,
                name=path.relative_to(conf_path).as_posix(),
                status=status,
            )
        )
    return tracked


def report(
    vault_root: Path, repo: Optional[Repository] = None
) -> list[ConfigurationReport]:
    """Walk every configuration and annotate its files.

    Args:
        vault_root: Vault directory.
        repo: Repository rooted at the vault, or None. Without one every
            file's status is None.

    Returns:
        One report per configuration in name order; empty when the vault
        has no configurations.
    """
    confs = list_configurations(vault_root)
    statuses = repo.status_snapshot() if repo is not None and confs else None

    reports = []
    for name, conf_path in confs:
        files = walk_configuration(vault_root, conf_path, statuses)
        state = ConfigurationState.POPULATED if files else ConfigurationState.EMPTY
        logger.debug("Configuration %s: %d entries", name, len(files))
        reports.append(
            ConfigurationReport(name=name, path=conf_path, state=state, files=files)
        )
    return reports
