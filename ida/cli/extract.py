"""Selective-disclosure extraction command.

Commands:
    ida extract <request> <dataset>   Filter a verified-claims dataset
"""

from typing import Optional

import typer

from ida.cli.output import OutputFormat, output, output_error
from ida.cli.utils import (
    EXIT_OMITTED,
    EXIT_PARSE_ERROR,
    parse_reference_time,
    read_json_input,
)
from ida.digest import json_digest
from ida.extractor import DatasetExtractor
from ida.loader import candidate_datasets, unwrap_verified_claims
from ida.models import ExtractionResult


def extract_cmd(
    request: str = typer.Argument(
        ...,
        help="verified_claims request: JSON file path, '-' for stdin, or JSON string",
    ),
    dataset: str = typer.Argument(
        ...,
        help="Original verified_claims dataset: JSON file path, '-' for stdin, or JSON string",
    ),
    now: Optional[str] = typer.Option(
        None,
        "--now",
        help="Reference time for max_age (ISO 8601, default: current UTC time)",
    ),
    transformed_claims: bool = typer.Option(
        True,
        "--transformed-claims/--no-transformed-claims",
        help="Pass ':name' and '::name' claims through",
    ),
    digest: bool = typer.Option(
        False,
        "--digest",
        help="Include the canonical SHA-256 of the result",
    ),
    format: OutputFormat = typer.Option(
        OutputFormat.json,
        "--format",
        "-f",
        help="Output format",
    ),
) -> None:
    """Extract the requested, constraint-satisfying part of a dataset.

    Either document may be wrapped in {"verified_claims": ...}. When the
    dataset holds several records, the first one satisfying the request
    is used.

    Exits 0 when a dataset was produced and 1 when the result is omitted.

    Examples:
        ida extract request.json dataset.json --now 2022-04-01T00:00:00Z
        cat request.json | ida extract - dataset.json --format pretty
    """
    if request == "-" and dataset == "-":
        output_error(
            code="STDIN_REUSED",
            message="Only one of REQUEST and DATASET may be read from stdin",
            exit_code=EXIT_PARSE_ERROR,
        )

    request_tree = unwrap_verified_claims(read_json_input(request, "request"))
    records = candidate_datasets(read_json_input(dataset, "dataset"))

    extractor = DatasetExtractor(
        parse_reference_time(now),
        transformed_claim_aware=transformed_claims,
    )
    filtered = extractor.extract_first(request_tree, records)

    result = ExtractionResult.build(
        dataset=filtered,
        reference_time=extractor.reference_time.isoformat(),
        transformed_claim_aware=extractor.transformed_claim_aware,
        digest=json_digest(filtered) if digest and filtered is not None else None,
    )
    output(result, format)

    if result.omitted:
        raise typer.Exit(EXIT_OMITTED)
