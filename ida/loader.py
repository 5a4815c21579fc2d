# Copyright (c) Rich Connexions Ltd. All rights reserved.
# Licensed under the MIT License. See LICENSE for details.
"""Decoding of raw request and dataset documents.

The extractor works on already-decoded trees; this module is the one
place where text becomes a tree and where undecodable input is reported.
"""

import json
from typing import Any, Dict, List, Union

from ida.config import KEY_VERIFIED_CLAIMS
from ida.exceptions import InputDecodingError

__all__ = ["parse_json_object", "unwrap_verified_claims", "candidate_datasets"]


def parse_json_object(raw: Union[str, bytes], what: str = "input") -> Dict[str, Any]:
    """Decode *raw* as a JSON object.

    Args:
        raw: JSON text, as str or UTF-8 bytes.
        what: Name of the document, used in error messages.

    Returns:
        The decoded mapping.

    Raises:
        InputDecodingError: Not JSON, or JSON whose top level is not an object.
    """
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InputDecodingError.not_json(what, str(e)) from e

    try:
        tree = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InputDecodingError.not_json(what, str(e)) from e

    if not isinstance(tree, dict):
        raise InputDecodingError.not_object(what, tree)
    return tree


def unwrap_verified_claims(tree: Dict[str, Any]) -> Union[Dict[str, Any], List[Any]]:
    """Strip a ``{"verified_claims": ...}`` envelope if there is one.

    Returns the inner value when it is an object or an array (OIDC4IDA
    §5.2 allows several records), otherwise *tree* unchanged.
    """
    inner = tree.get(KEY_VERIFIED_CLAIMS)
    if isinstance(inner, (dict, list)):
        return inner
    return tree


def candidate_datasets(tree: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Every ``verified_claims`` record held by *tree*, in document order."""
    inner = unwrap_verified_claims(tree)
    if isinstance(inner, list):
        return [record for record in inner if isinstance(record, dict)]
    return [inner]
