"""CLI package bootstrap.

Defines the root group (`cli`) in helpers and imports submodules so their
decorators register commands.
"""
from tracksaver.cli.helpers import cli  # root group
from tracksaver.cli import auth_cmds  # noqa: F401
from tracksaver.cli import playlist_cmds  # noqa: F401
from tracksaver.cli import track_cmds  # noqa: F401

__all__ = ["cli"]
