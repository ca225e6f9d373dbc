#!/usr/bin/env python3

import click

from gitax.api import GitAx
from gitax.cli_utils import standard_command, add_common_options
from gitax.commands.config import config_cmd
from gitax.commands.file import file_cmd
from gitax.commands.folder import folder_cmd, index_handler


@click.group()
@click.version_option(package_name='gitax')
def cli():
    """gitax - File-level git history for ERP version control.

    Lists the commits that changed a file, materializes old versions,
    reports working-tree status and synchronises folders to the tip.
    """
    pass


@cli.command('init')
@click.argument('repo', type=click.Path(file_okay=False))
@add_common_options('format', 'quiet')
@standard_command
def init_handler(repo, **kwargs):
    """Create a repository at REPO."""
    return {'repository': GitAx().init(repo)}


@cli.command('version')
@standard_command
def version_handler(**kwargs):
    """Show the gitax and dulwich versions."""
    return GitAx().version()


# Command groups
cli.add_command(file_cmd)
cli.add_command(folder_cmd)
cli.add_command(index_handler)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
