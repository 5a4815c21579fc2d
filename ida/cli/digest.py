"""Canonical digest command.

Commands:
    ida digest <source>   Order-insensitive SHA-256 of a JSON document
"""

from typing import List, Optional

import typer

from ida.cli.output import OutputFormat, output, output_error
from ida.cli.utils import EXIT_PARSE_ERROR, read_json_input
from ida.digest import DigestFeature, json_digest
from ida.exceptions import CanonicalizationError
from ida.models import DigestResult


def digest_cmd(
    source: str = typer.Argument(
        ...,
        help="JSON file path, '-' for stdin, or JSON string",
    ),
    ignore: Optional[List[DigestFeature]] = typer.Option(
        None,
        "--ignore",
        "-i",
        help="Drop object entries with this kind of value (repeatable)",
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.json,
        "--format",
        "-f",
        help="Output format",
    ),
) -> None:
    """Print the canonical digest of a JSON document.

    Two documents differing only in object key order have the same digest.

    Examples:
        ida digest filtered.json
        ida digest - --ignore ignore_null --ignore ignore_empty_object < a.json
    """
    data = read_json_input(source)
    features = list(ignore or [])

    try:
        value = json_digest(data, ignore=features)
    except CanonicalizationError as e:
        output_error(code=e.code, message=e.message, exit_code=EXIT_PARSE_ERROR)
        return

    output(DigestResult(digest=value, ignored=[f.value for f in features]), format)
