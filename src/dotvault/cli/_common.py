"""Shared utilities for all CLI command modules.

Provides the Rich console, the per-invocation state object and the
helpers that turn it into a VaultContext or a clean exit.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import NoReturn, Optional

import click
from rich.console import Console
from rich.markup import escape

from ..config import VaultContext, load_context
from ..errors import DotvaultError

console = Console()


@dataclass
class CliState:
    """Options given to the main group."""

    vault: Optional[str] = None
    verbose: bool = False


def configure_logging(verbose: bool, level: str = "WARNING") -> None:
    """Send dotvault's log records to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.WARNING),
        format="%(name)s: %(message)s",
    )


def vault_context(ctx: click.Context) -> VaultContext:
    """Resolve the vault for the running command and configure logging.

    Raises:
        DotvaultError: If the vault is unset, missing or misconfigured.
    """
    state = ctx.find_object(CliState) or CliState()
    vctx = load_context(state.vault)
    configure_logging(state.verbose, vctx.settings.log_level)
    return vctx


def fail(exc: DotvaultError) -> NoReturn:
    """Report an error once and exit non-zero."""
    console.print(f"  [bold red]Error:[/] {escape(str(exc))}")
    sys.exit(1)
