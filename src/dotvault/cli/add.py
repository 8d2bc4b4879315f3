"""Add command: move files into a configuration and link them back."""

from __future__ import annotations

import click
from rich.markup import escape

from ._common import console, fail, vault_context
from ..errors import DotvaultError, RelocationError, ValidationError
from ..models import RelocationResult, RelocationState
from ..relocate import relocate
from ..validation import validate_files


def _validate_files(ctx: click.Context, param: click.Parameter, values: tuple[str, ...]):
    try:
        return validate_files(values)
    except ValidationError as exc:
        raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc


def _print_result(result: RelocationResult) -> None:
    if result.state == RelocationState.SKIPPED:
        console.print(
            f"  [yellow]⚠[/] [cyan]{escape(str(result.destination))}[/] already existing. Skipping"
        )
    else:
        console.print(
            f"  [blue]→[/] Moved and linked: [yellow]{escape(str(result.source))}[/]"
            f" → [cyan]{escape(str(result.destination))}[/]"
        )


def register_add_commands(main: click.Group) -> None:
    """Register the add command on the main CLI group."""

    @main.command()
    @click.argument("conf_name")
    @click.argument("files", nargs=-1, type=click.Path(), callback=_validate_files)
    @click.option("--yes", "-y", is_flag=True, help="Create a missing configuration without asking.")
    @click.pass_context
    def add(ctx: click.Context, conf_name: str, files: list, yes: bool):
        """Move FILES into the CONF_NAME configuration and symlink them back.

        FILES are paths relative to the current directory. Each one is
        mirrored under the configuration, so ``.config/nvim`` ends up in
        ``<vault>/CONF_NAME/.config/nvim``.

        Examples:

            cd ~ && dotvault add nvim .config/nvim

            dotvault add zsh .zshrc .zprofile --yes
        """
        try:
            vctx = vault_context(ctx)
        except DotvaultError as exc:
            fail(exc)

        conf_path = vctx.root / conf_name
        if not conf_path.exists():
            if vctx.settings.confirm_create and not yes:
                if not click.confirm(
                    f"'{conf_name}' configuration does not exist. Do you want to create it?",
                    default=False,
                ):
                    return

            try:
                conf_path.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                fail(DotvaultError(f"Cannot create {conf_path}: {exc}"))
            console.print(f"  [green]✓[/] Created configuration: [cyan]{escape(conf_name)}[/]")

        if not files:
            console.print("  [blue]ℹ[/] No files specified")
            return

        try:
            results = relocate(files, conf_path)
        except RelocationError as exc:
            for done in exc.completed:
                _print_result(done)
            console.print(
                f"  [red]✗[/] {escape(str(exc.result.source))} left in state "
                f"[bold]{exc.result.state.value}[/]"
            )
            fail(DotvaultError(f"Failed to move and symlink files for {conf_path}: {exc}"))

        for result in results:
            _print_result(result)
