"""ida CLI - Main entry point with command registration.

This module defines the main typer app and registers all commands.
"""

from typing import Optional

import typer

from ida import __version__
from ida.cli.digest import digest_cmd
from ida.cli.extract import extract_cmd
from ida.cli.log_config import configure_logging

# Main app
app = typer.Typer(
    name="ida",
    help="Selective disclosure of OpenID Connect for Identity Assurance datasets.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"ida version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Diagnostic log level (default: IDA_LOG_LEVEL or INFO)",
    ),
    log_format: Optional[str] = typer.Option(
        None,
        "--log-format",
        help="Diagnostic log format, json or text (default: IDA_LOG_FORMAT or json)",
    ),
) -> None:
    """Selective disclosure of OpenID Connect for Identity Assurance datasets.

    All commands accept '-' to read a document from stdin. Results are
    JSON on stdout; diagnostics are logged to stderr.

    Examples:
        ida extract request.json dataset.json
        ida --log-level DEBUG extract request.json dataset.json
        ida digest filtered.json
    """
    configure_logging(log_level, log_format)


app.command("extract")(extract_cmd)
app.command("digest")(digest_cmd)


if __name__ == "__main__":
    app()
