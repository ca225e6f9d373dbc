"""
Output format utilities for gitax CLI commands.

Formats result records (dicts) as JSONL, JSON, CSV, TSV or YAML.
"""

import csv
import io
import json
import os
from typing import Any, Dict, Iterable, Iterator, List, Optional

import yaml

FORMATS = ('jsonl', 'json', 'csv', 'tsv', 'yaml')


def format_output(data: Iterable[Dict[str, Any]], format: str,
                  fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format records according to the specified format.

    Args:
        data: Records to format
        format: Output format (jsonl, json, csv, tsv, yaml)
        fields: Optional list of columns to include (for CSV/TSV)

    Yields:
        Formatted strings for output
    """
    if format == "jsonl":
        for item in data:
            yield json.dumps(item, ensure_ascii=False, default=str)
    elif format == "json":
        yield json.dumps(list(data), ensure_ascii=False, indent=2, default=str)
    elif format == "yaml":
        yield yaml.safe_dump(list(data), default_flow_style=False, allow_unicode=True, sort_keys=False)
    elif format == "csv":
        yield from format_delimited(data, ',', fields)
    elif format == "tsv":
        yield from format_delimited(data, '\t', fields)
    else:
        raise ValueError(f"Unknown format: {format}")


def format_delimited(data: Iterable[Dict[str, Any]], delimiter: str,
                     fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format records as delimiter-separated values with a header row.

    Columns default to the keys of the first record, in order.
    """
    rows = list(data)
    if not rows:
        return

    if fields is None:
        fields = list(rows[0].keys())

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fields, delimiter=delimiter, extrasaction='ignore')
    writer.writeheader()
    for row in rows:
        writer.writerow(row)

    yield output.getvalue().rstrip('\r\n')


def get_format_from_env(default: str = 'jsonl') -> str:
    """
    Get output format from the GITAX_FORMAT environment variable.

    Unknown values fall back to default.
    """
    format = os.environ.get('GITAX_FORMAT', default).lower()
    if format not in FORMATS:
        return default
    return format
