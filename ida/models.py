# Copyright (c) Rich Connexions Ltd. All rights reserved.
# Licensed under the MIT License. See LICENSE for details.
"""Result envelopes for the extraction front ends."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ExtractionResult(BaseModel):
    """Outcome of one extraction.

    ``dataset`` is null exactly when ``omitted`` is true: either the
    request could not be satisfied under ``verification`` or nothing that
    was requested is available.
    """

    dataset: Optional[Dict[str, Any]] = None
    omitted: bool
    reference_time: str
    transformed_claim_aware: bool = True
    digest: Optional[str] = Field(
        default=None, description="Canonical SHA-256 of the dataset, when requested"
    )

    @classmethod
    def build(
        cls,
        dataset: Optional[Dict[str, Any]],
        reference_time: str,
        transformed_claim_aware: bool = True,
        digest: Optional[str] = None,
    ) -> "ExtractionResult":
        return cls(
            dataset=dataset,
            omitted=dataset is None,
            reference_time=reference_time,
            transformed_claim_aware=transformed_claim_aware,
            digest=digest,
        )


class DigestResult(BaseModel):
    digest: str
    algorithm: str = "sha256"
    ignored: list[str] = Field(default_factory=list)


class ErrorDetail(BaseModel):
    error: bool = True
    code: str
    message: str
