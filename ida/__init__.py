# Copyright (c) Rich Connexions Ltd. All rights reserved.
# Licensed under the MIT License. See LICENSE for details.
"""Selective disclosure of verified claims (OpenID Connect for Identity Assurance 1.0).

Given a ``verified_claims`` request and the full verified-claims record held
for a subject, :class:`DatasetExtractor` builds the subset that may be
returned to the relying party.
"""

__version__ = "0.1.0"

from ida.exceptions import (
    CanonicalizationError,
    IdaError,
    InputDecodingError,
    RecursionCeilingError,
)
from ida.extractor import DatasetExtractor

__all__ = [
    "__version__",
    "DatasetExtractor",
    "IdaError",
    "InputDecodingError",
    "RecursionCeilingError",
    "CanonicalizationError",
]
