"""
Relocate file trees into the vault and link them back.

Each path goes through three phases:

    copy    the whole tree is copied into the configuration directory and
            every file is compared byte-for-byte with its source
    delete  the original tree is removed
    link    a symlink to the vault copy is created where the content was

This is copy-then-delete, not a rename, so it works across filesystems.
There is no rollback. If a phase fails, the error carries a
RelocationResult whose state tells what is left on disk:

    UNTOUCHED             nothing changed
    PARTIAL_COPY          original intact, an incomplete copy sits in the vault
    ORIGINAL_NOT_REMOVED  full copy in the vault, original partly deleted
    MOVED_NOT_LINKED      content only in the vault, no link at the original
                          location; recreate it by hand with ``ln -s``

Paths relocated earlier in the same batch stay relocated.
"""

from __future__ import annotations

import filecmp
import logging
import os
import shutil
from pathlib import Path
from typing import Iterable, Union

from .errors import RelocationError
from .models import RelocationResult, RelocationState

logger = logging.getLogger("dotvault.relocate")


def _copy_tree(src: Path, dst: Path) -> None:
    """Copy ``src`` to ``dst`` depth-first, verifying every file."""
    if src.is_dir():
        dst.mkdir(parents=True, exist_ok=True)
        for entry in sorted(src.iterdir()):
            _copy_tree(entry, dst / entry.name)
        return

    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)
    if not filecmp.cmp(src, dst, shallow=False):
        raise OSError(f"Copy of {src} does not match the original")


def _remove_source(src: Path) -> None:
    if src.is_dir() and not src.is_symlink():
        shutil.rmtree(src)
    else:
        src.unlink()


def _is_within(path: Path, parent: Path) -> bool:
    return path == parent or parent in path.parents


def relocate_path(path: Union[str, Path], target_dir: Path) -> RelocationResult:
    """Move one file or directory into ``target_dir`` and link it back.

    Args:
        path: Path relative to the current directory. Its relative form is
            mirrored under ``target_dir``.
        target_dir: Configuration directory inside the vault.

    Returns:
        A LINKED result, or SKIPPED when the destination already exists.

    Raises:
        RelocationError: If any phase fails.
    """
    source = Path(path)
    dest = target_dir / source

    if os.path.lexists(dest):
        logger.info("%s already exists, skipping", dest)
        return RelocationResult(
            source=source, destination=dest, state=RelocationState.SKIPPED
        )

    if ".." in source.parts:
        logger.warning(
            "%s contains parent directory segments; it will be placed at %s",
            source,
            dest,
        )

    destination = dest.absolute()
    result = RelocationResult(
        source=source, destination=destination, state=RelocationState.UNTOUCHED
    )

    # Must happen before the move: resolution needs the path in place
    try:
        canonical = source.resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise RelocationError(
            f"Error during file canonicalization of {source}: {exc}", result
        ) from exc
    result.link = canonical

    if _is_within(destination.resolve(), canonical):
        raise RelocationError(
            f"Cannot relocate {source} into {dest}: destination is inside the source",
            result,
        )

    try:
        _copy_tree(canonical, destination)
    except OSError as exc:
        result.state = RelocationState.PARTIAL_COPY
        raise RelocationError(
            f"Failed to copy {source} to {dest}: {exc}", result
        ) from exc

    try:
        _remove_source(canonical)
    except OSError as exc:
        result.state = RelocationState.ORIGINAL_NOT_REMOVED
        raise RelocationError(
            f"Copied {source} to {dest} but failed to remove the original: {exc}",
            result,
        ) from exc

    try:
        os.symlink(destination, canonical, target_is_directory=destination.is_dir())
    except OSError as exc:
        result.state = RelocationState.MOVED_NOT_LINKED
        raise RelocationError(
            f"Moved {source} to {dest} but failed to create the symlink "
            f"{canonical} -> {destination}: {exc}",
            result,
        ) from exc

    result.state = RelocationState.LINKED
    logger.info("Moved and linked: %s -> %s", source, destination)
    return result


def relocate(
    paths: Iterable[Union[str, Path]], target_dir: Path
) -> list[RelocationResult]:
    """Relocate each path in order into ``target_dir``.

    The first failure stops the batch. The raised RelocationError lists
    the results that completed before it in ``completed``.

    Args:
        paths: Relative paths, already validated.
        target_dir: Configuration directory inside the vault.

    Returns:
        One result per input path.
    """
    results: list[RelocationResult] = []
    for path in paths:
        try:
            results.append(relocate_path(path, target_dir))
        except RelocationError as exc:
            exc.completed = results
            raise
    return results
