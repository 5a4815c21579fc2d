"""Shared utilities for the ida CLI.

This module provides common functionality for:
- Reading input from stdin, files, or arguments
- Decoding JSON documents with uniform error reporting
- Exit codes
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ida.cli.output import output_error
from ida.exceptions import InputDecodingError
from ida.loader import parse_json_object
from ida.matcher import parse_instant

# Exit codes
EXIT_SUCCESS = 0
EXIT_OMITTED = 1
EXIT_PARSE_ERROR = 2
EXIT_IO_ERROR = 3


def read_input(source: str, encoding: str = "utf-8") -> str:
    """Read input from stdin, file, or argument.

    Args:
        source: Input source - "-" for stdin, file path, or literal value
        encoding: Text encoding for files

    Returns:
        Content as string

    Raises:
        typer.Exit: On I/O errors with EXIT_IO_ERROR
    """
    try:
        if source == "-":
            return sys.stdin.read()

        path = Path(source)
        if path.exists() and path.is_file():
            return path.read_text(encoding=encoding)

        # Treat as literal JSON text
        return source

    except (OSError, UnicodeDecodeError) as e:
        output_error(code="IO_ERROR", message=f"Error reading {source}: {e}", exit_code=EXIT_IO_ERROR)
        raise  # unreachable, output_error always exits


def read_json_input(source: str, what: str = "input") -> dict[str, Any]:
    """Read a JSON object from stdin, file, or argument.

    Raises:
        typer.Exit: On I/O or parse errors
    """
    content = read_input(source)

    try:
        return parse_json_object(content, what)
    except InputDecodingError as e:
        output_error(code=e.code, message=e.message, exit_code=EXIT_PARSE_ERROR)
        raise  # unreachable


def parse_reference_time(value: Optional[str]) -> datetime:
    """Parse the ``--now`` option; the current UTC time when not given.

    Accepts the same date and datetime forms ``max_age`` does.
    """
    if value is None:
        return datetime.now(timezone.utc)

    instant = parse_instant(value)
    if instant is None:
        output_error(
            code="INVALID_REFERENCE_TIME",
            message=f"Cannot parse reference time: {value!r}",
            exit_code=EXIT_PARSE_ERROR,
        )
    return instant
