"""
dotvault CLI — status, add and sync for the dotfiles vault.

The main Click group is defined here and every command is registered
from its own module.

Entry point: dotvault.cli:main
"""

from __future__ import annotations

import click

from .. import VAULT_DIR_ENV, __version__
from ._common import CliState


@click.group()
@click.version_option(version=__version__, prog_name="dotvault")
@click.option(
    "--vault",
    envvar=VAULT_DIR_ENV,
    type=click.Path(),
    help=f"Vault directory. Defaults to ${VAULT_DIR_ENV}.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every step, including git commands.")
@click.pass_context
def main(ctx: click.Context, vault: str, verbose: bool):
    """dotvault — keep your dotfiles in one git vault.

    Move configuration files into the vault, leave symlinks behind,
    and sync the vault as a single commit.
    """
    ctx.obj = CliState(vault=vault, verbose=verbose)


from .status import register_status_commands
from .add import register_add_commands
from .sync_cmd import register_sync_commands

register_status_commands(main)
register_add_commands(main)
register_sync_commands(main)
