"""
Folder and index commands for gitax.
"""

import click

from ..api import GitAx
from ..cli_utils import standard_command, add_common_options
from ..render import render_files_table


@click.group(name='folder')
def folder_cmd():
    """Commands on a folder of the working tree."""
    pass


@folder_cmd.command('sync')
@click.argument('repo', type=click.Path(file_okay=False))
@click.argument('folder')
@click.option('--force', is_flag=True, help='Overwrite local changes')
@click.option('--source', type=click.Choice(['tree', 'filesystem']), default=None,
              help='List files from the tip tree (default) or from disk')
@click.option('-p', '--pattern', 'patterns', multiple=True,
              help='File name glob to report (repeatable, default from config: *.xpo)')
@add_common_options('table', 'format', 'fields', 'quiet')
@standard_command
def sync_handler(repo, folder, force, source, patterns, table, **kwargs):
    """Check out FOLDER at the tip of HEAD and list its files of interest.

    Every listed file is tagged "Update" with the tip commit id.

    Examples:

    \b
        gitax folder sync ~/ax Classes --force
        gitax folder sync ~/ax . -p '*.xpo' -p '*.xml' --table
    """
    records = GitAx().folder_sync(repo, folder, force, source, list(patterns) or None)
    if table:
        render_files_table(records, title=f"Synchronised {folder}")
        return None
    return records


@click.command(name='index')
@click.argument('repo', type=click.Path(file_okay=False))
@add_common_options('table', 'format', 'fields', 'quiet')
@standard_command
def index_handler(repo, table, **kwargs):
    """List every modified-but-uncommitted file in REPO.

    Staged files are copied from the index, untracked ones from the working
    tree, into the temporary directory.
    """
    records = GitAx().get_files_in_index(repo)
    if table:
        render_files_table(records, title="Uncommitted files")
        return None
    return records
