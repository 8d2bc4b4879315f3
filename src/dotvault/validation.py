"""Input path checks run before anything is relocated."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .errors import ValidationError


def validate_file(value: str) -> Path:
    """Accept an existing path relative to the current directory.

    Raises:
        ValidationError: If the path does not exist or is absolute.
    """
    path = Path(value)

    if not path.exists():
        raise ValidationError(f"File '{value}' does not exist")

    if path.is_absolute():
        raise ValidationError(
            "Use only paths relative to the configuration directory, not absolute"
        )

    return path


def validate_files(values: Iterable[str]) -> list[Path]:
    return [validate_file(v) for v in values]
