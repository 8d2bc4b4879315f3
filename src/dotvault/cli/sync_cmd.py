"""Sync command: commit every vault change and optionally push it."""

from __future__ import annotations

import click
from rich.markup import escape

from ._common import console, fail, vault_context
from ..errors import DotvaultError
from ..models import SyncOutcome
from ..sync import SyncEngine


def register_sync_commands(main: click.Group) -> None:
    """Register the sync command on the main CLI group."""

    @main.command("sync")
    @click.option("--push", "-p", is_flag=True, help="Push to the origin remote after committing.")
    @click.option("--no-push", is_flag=True, help="Do not push, even if the vault settings say so.")
    @click.pass_context
    def sync(ctx: click.Context, push: bool, no_push: bool):
        """Commit all vault changes as one "Sync dotfiles" commit.

        Examples:

            dotvault sync

            dotvault sync --push
        """
        try:
            vctx = vault_context(ctx)
            should_push = (push or vctx.settings.push) and not no_push
            result = SyncEngine(vctx.repo).sync(push=should_push)
        except DotvaultError as exc:
            fail(exc)

        if result.outcome == SyncOutcome.NO_CHANGES:
            console.print("  [blue]ℹ[/] No changes to sync")
            return

        console.print(f"  [green]✓[/] Committed changes: [yellow]{result.short_id}[/]")
        if result.pushed:
            console.print(f"  [green]✓[/] Pushed to remote ([cyan]{escape(str(result.branch))}[/])")
