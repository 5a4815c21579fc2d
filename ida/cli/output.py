"""Output formatting utilities for the ida CLI.

Supports two output formats:
- json: Machine-readable JSON (default, for piping)
- pretty: Indented JSON for human reading
"""

import json
import sys
from enum import Enum
from typing import Any, Optional

import typer
from pydantic import BaseModel

from ida.models import ErrorDetail


class OutputFormat(str, Enum):
    """Output format options."""

    json = "json"
    pretty = "pretty"


def output_json(data: Any, pretty: bool = False) -> None:
    """Output data as JSON to stdout.

    Args:
        data: Data to output (must be JSON-serializable)
        pretty: If True, output with indentation
    """
    indent = 2 if pretty else None
    try:
        typer.echo(json.dumps(data, indent=indent, ensure_ascii=False))
    except (TypeError, ValueError) as e:
        typer.echo(f"Error serializing output: {e}", err=True)
        raise typer.Exit(2) from e


def output(data: Any, format: OutputFormat = OutputFormat.json) -> None:
    """Output data in the specified format.

    Pydantic models are dumped in JSON mode first.
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")
    output_json(data, pretty=format == OutputFormat.pretty)


def output_error(
    code: str,
    message: str,
    exit_code: int = 1,
    details: Optional[dict[str, Any]] = None,
) -> None:
    """Output an error as JSON to stderr and exit."""
    error_data = ErrorDetail(code=code, message=message).model_dump()
    if details:
        error_data["details"] = details

    print(json.dumps(error_data), file=sys.stderr)
    raise typer.Exit(exit_code)
