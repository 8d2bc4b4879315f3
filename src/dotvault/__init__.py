"""
dotvault — keep your dotfiles in one version-controlled vault.

Configuration trees are moved into the vault and their original
locations are replaced with symlinks. The vault can then be inspected
against git status and synced as a single commit.
"""

__version__ = "0.1.0"

VAULT_DIR_ENV = "VAULT_DIR"

# Directory entries starting with this marker are never configurations
HIDDEN_PREFIX = "."

SYNC_MESSAGE = "Sync dotfiles"
