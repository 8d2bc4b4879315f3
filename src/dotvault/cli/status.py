"""Status command: vault location, repository and per-configuration file status."""

from __future__ import annotations

from typing import Optional

import click
from rich.markup import escape

from ._common import console, fail, vault_context
from ..errors import DotvaultError
from ..models import ConfigurationState, StatusKind, TrackedFile
from ..status import report

_STATUS_LABELS = {
    StatusKind.STAGED_NEW: ("[new]", "green"),
    StatusKind.STAGED_MODIFIED: ("[modified]", "yellow"),
    StatusKind.STAGED_DELETED: ("[deleted]", "red"),
    StatusKind.UNSTAGED_NEW: ("[untracked]", "cyan"),
    StatusKind.UNSTAGED_MODIFIED: ("[modified]", "yellow"),
    StatusKind.UNSTAGED_DELETED: ("[deleted]", "red"),
    StatusKind.IGNORED: ("[ignored]", "dim"),
    StatusKind.OTHER_TRACKED: ("[ok]", "blue"),
}


def status_label(status: Optional[StatusKind]) -> str:
    """Rich markup annotation for a file status; empty when there is none."""
    if status is None:
        return ""
    label, style = _STATUS_LABELS[status]
    return f" [{style}]{escape(label)}[/]"


def _file_line(tracked: TrackedFile) -> str:
    return f"      [yellow]•[/] {escape(tracked.name)}{status_label(tracked.status)}"


def register_status_commands(main: click.Group) -> None:
    """Register the status command on the main CLI group."""

    @main.command()
    @click.pass_context
    def status(ctx: click.Context):
        """Show the vault, its configurations and their git status."""
        try:
            vctx = vault_context(ctx)

            console.print()
            console.print(f"  [blue]→[/] Vault location: [cyan]{escape(str(vctx.root))}[/]")
            if vctx.repo is not None:
                console.print(
                    f"  [blue]→[/] GIT repo location: [cyan]{escape(str(vctx.repo.git_dir))}[/]"
                )
                branch = vctx.repo.head_shorthand()
                if branch:
                    console.print(f"  [blue]→[/] Current branch: [cyan]{escape(branch)}[/]")
            console.print()

            reports = report(vctx.root, vctx.repo)
        except DotvaultError as exc:
            fail(exc)

        if not reports:
            console.print("  [blue]ℹ[/] No configurations found")
            return

        for conf in reports:
            console.print(f"  [blue]→[/] [bold red]{escape(conf.name)}[/]")
            if conf.state == ConfigurationState.EMPTY:
                console.print("      [dim]· (empty)[/]")
            else:
                for tracked in conf.files:
                    console.print(_file_line(tracked))
            console.print()
