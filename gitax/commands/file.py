"""
Single-file commands for gitax.

History, versions, undo, existence and status of one tracked file.
"""

import click

from ..api import GitAx
from ..cli_utils import standard_command, add_common_options
from ..render import render_history_table


@click.group(name='file')
def file_cmd():
    """Commands on a single tracked file.

    REPO is the repository root. FILE may be absolute or relative to REPO.

    Examples:

    \b
        gitax file history ~/ax ~/ax/Classes/Foo.xpo
        gitax file show ~/ax Classes/Foo.xpo 1a2b3c4 --dest /tmp/Foo.xpo
        gitax file undo ~/ax Classes/Foo.xpo --force
        gitax file status ~/ax Classes/Foo.xpo
    """
    pass


@file_cmd.command('history')
@click.argument('repo', type=click.Path(file_okay=False))
@click.argument('file')
@add_common_options('table', 'format', 'fields', 'quiet')
@standard_command
def history_handler(repo, file, table, **kwargs):
    """List the commits that changed FILE, newest first.

    Merge commits and the root commit are never listed. Each entry points to
    a copy of the file as of that commit in the temporary directory.
    """
    records = GitAx().file_history(repo, file)
    if table:
        render_history_table(records)
        return None
    return records


@file_cmd.command('show')
@click.argument('repo', type=click.Path(file_okay=False))
@click.argument('file')
@click.argument('object_id')
@click.option('--dest', 'destination', type=click.Path(dir_okay=False),
              help='Write the version here instead of checking it out in place')
@add_common_options('format', 'quiet')
@standard_command
def show_handler(repo, file, object_id, destination, **kwargs):
    """Get FILE as of OBJECT_ID.

    OBJECT_ID is a commit id, or with --dest also a content (blob) id.
    Without --dest the working file is overwritten by a forced checkout.
    """
    path = GitAx().file_get_version(repo, file, object_id, destination)
    return {'path': path, 'id': object_id}


@file_cmd.command('undo')
@click.argument('repo', type=click.Path(file_okay=False))
@click.argument('file')
@click.option('--force', is_flag=True, help='Overwrite local changes')
@add_common_options('format', 'quiet')
@standard_command
def undo_handler(repo, file, force, **kwargs):
    """Reset FILE to the last commit that changed it."""
    reset = GitAx().file_undo_checkout(repo, file, force)
    return {'file': file, 'reset': reset}


@file_cmd.command('exists')
@click.argument('repo', type=click.Path(file_okay=False))
@click.argument('file')
@add_common_options('format', 'quiet')
@standard_command
def exists_handler(repo, file, **kwargs):
    """Check whether FILE exists in any commit of HEAD's history."""
    return {'file': file, 'exists': GitAx().file_exists(repo, file)}


@file_cmd.command('status')
@click.argument('repo', type=click.Path(file_okay=False))
@click.argument('file')
@add_common_options('format', 'quiet')
@standard_command
def status_handler(repo, file, **kwargs):
    """Show the working-tree status of FILE."""
    return {'file': file, 'status': GitAx().get_file_status(repo, file).value}
