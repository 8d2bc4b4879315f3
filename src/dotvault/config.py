"""
Vault context -- where the vault lives and how it is configured.

The vault root is resolved once by the caller (the CLI reads it from
``VAULT_DIR``) and passed around explicitly inside a VaultContext.
Optional per-vault settings live in ``<vault>/.dotvault.yaml``:

    push: false            # default for `dotvault sync`
    confirm_create: true   # ask before `dotvault add` creates a configuration
    log_level: WARNING
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, field_validator

from . import VAULT_DIR_ENV
from .errors import ConfigurationError
from .repo import Repository

logger = logging.getLogger("dotvault.config")

SETTINGS_FILE = ".dotvault.yaml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class VaultSettings(BaseModel):
    """Per-vault settings loaded from the settings file."""

    push: bool = False
    confirm_create: bool = True
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


@dataclass
class VaultContext:
    """Everything a command needs to know about the vault."""

    root: Path
    repo: Optional[Repository] = None
    settings: VaultSettings = field(default_factory=VaultSettings)


def resolve_vault_root(value: Optional[Union[str, Path]]) -> Path:
    """Turn the configured vault location into an existing directory.

    Raises:
        ConfigurationError: If unset or not a directory.
    """
    if value is None or str(value) == "":
        raise ConfigurationError(f"{VAULT_DIR_ENV} must be set")

    root = Path(value).expanduser()
    if not root.is_dir():
        raise ConfigurationError(f"{VAULT_DIR_ENV} is not a directory: {root}")
    return root


def load_settings(root: Path) -> VaultSettings:
    """Load ``.dotvault.yaml`` from the vault root, or defaults if absent.

    Raises:
        ConfigurationError: If the file is unreadable or invalid.
    """
    settings_file = root / SETTINGS_FILE
    if not settings_file.exists():
        return VaultSettings()

    try:
        data = yaml.safe_load(settings_file.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError("expected a mapping at the top level")
        return VaultSettings(**data)
    except (OSError, yaml.YAMLError, ValueError) as exc:
        raise ConfigurationError(f"Invalid settings in {settings_file}: {exc}") from exc


def load_context(value: Optional[Union[str, Path]]) -> VaultContext:
    """Resolve the vault, load its settings and open its repository if any."""
    root = resolve_vault_root(value)
    settings = load_settings(root)
    repo = Repository.open(root)
    if repo is None:
        logger.debug("No git repository at %s", root)
    return VaultContext(root=root, repo=repo, settings=settings)
