"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import logging
import sys
import click
from functools import wraps
from typing import Any, Iterable

from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .format_utils import format_output, get_format_from_env

logger = logging.getLogger(__name__)


def _as_dict(item: Any) -> Any:
    if hasattr(item, 'to_dict'):
        return item.to_dict()
    return item


def emit(result: Any, output_format: str, fields=None) -> None:
    """Print a command result on stdout in the requested format."""
    if isinstance(result, dict) or hasattr(result, 'to_dict'):
        items: Iterable[Any] = [_as_dict(result)]
    elif isinstance(result, (list, tuple)):
        items = [_as_dict(item) for item in result]
    else:
        # Scalars (paths, version strings) are printed as they are
        print(result, flush=True)
        return

    for line in format_output(items, output_format, fields):
        print(line, flush=True)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Clean data output on stdout (JSONL by default)
    - Automatic --quiet/-q handling to suppress data output
    - Errors reported on stderr and as a JSON object on stdout
    - Exit codes from exit_codes
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        quiet = kwargs.get('quiet', False)
        output_format = kwargs.get('format') or get_format_from_env('jsonl')
        fields_str = kwargs.get('fields')
        fields = fields_str.split(',') if fields_str else None

        try:
            result = func(*args, **kwargs)

            if result is not None and not quiet:
                emit(result, output_format, fields)

            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            click.echo("Interrupted by user", err=True)
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except CommandError as e:
            click.echo(f"ERROR: {e}", err=True)
            if not quiet:
                error_obj = {
                    "error": str(e),
                    "type": type(e).__name__,
                    "exit_code": e.exit_code
                }
                print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(e.exit_code)
        except Exception as e:
            logger.debug("Command failed", exc_info=True)
            click.echo(f"ERROR: Command failed: {e}", err=True)
            if not quiet:
                error_obj = {
                    "error": str(e),
                    "type": type(e).__name__
                }
                print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


# Standard options that many commands share
common_options = {
    'quiet': click.option('-q', '--quiet', is_flag=True,
                         help='Suppress data output'),
    'format': click.option('-f', '--format',
                         type=click.Choice(['json', 'jsonl', 'csv', 'tsv', 'yaml']),
                         help='Output format (default: jsonl, or from GITAX_FORMAT env)'),
    'fields': click.option('--fields',
                         help='Comma-separated list of fields to include (for CSV/TSV)'),
    'table': click.option('--table', is_flag=True,
                         help='Display as a formatted table'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('quiet', 'format')
        def my_command(quiet, format):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
