# Copyright (c) Rich Connexions Ltd. All rights reserved.
# Licensed under the MIT License. See LICENSE for details.

"""Order-insensitive digest of JSON trees.

Two trees that differ only in the order of object keys produce the same
digest. Array order is significant. The canonical form is compact JSON
with sorted keys, integral floats written as integers (``1.0`` → ``1``)
and UTF-8 encoding.

Optional :class:`DigestFeature` flags drop object entries whose value is
"empty" in some sense before hashing, so that ``{"a": null}`` and ``{}``
can be made to compare equal.

The extractor itself does not use this module; it exists for callers and
tests that need to compare filtered datasets.
"""

from __future__ import annotations

import hashlib
import json
import math
from enum import Enum
from typing import Any, Iterable

from ida.exceptions import CanonicalizationError

__all__ = [
    "DigestFeature",
    "canonicalize",
    "canonical_serialize",
    "json_digest",
    "digest_equal",
]


class DigestFeature(str, Enum):
    """Object entries to leave out of the digest, by value."""

    IGNORE_NULL = "ignore_null"
    IGNORE_FALSE = "ignore_false"
    IGNORE_ZERO = "ignore_zero"
    IGNORE_EMPTY_STRING = "ignore_empty_string"
    IGNORE_EMPTY_ARRAY = "ignore_empty_array"
    IGNORE_EMPTY_OBJECT = "ignore_empty_object"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _ignored(value: Any, features: frozenset) -> bool:
    if value is None:
        return DigestFeature.IGNORE_NULL in features
    if value is False:
        return DigestFeature.IGNORE_FALSE in features
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value == 0:
        return DigestFeature.IGNORE_ZERO in features
    if value == "":
        return DigestFeature.IGNORE_EMPTY_STRING in features
    if value == []:
        return DigestFeature.IGNORE_EMPTY_ARRAY in features
    if value == {}:
        return DigestFeature.IGNORE_EMPTY_OBJECT in features
    return False


def _normalize(value: Any, features: frozenset, pointer: str) -> Any:
    if isinstance(value, dict):
        for key in value:
            if not isinstance(key, str):
                raise CanonicalizationError.unsupported(pointer, key)
        result = {}
        for key in sorted(value):
            item = _normalize(value[key], features, f"{pointer}/{key}")
            if not _ignored(item, features):
                result[key] = item
        return result
    if isinstance(value, (list, tuple)):
        return [_normalize(v, features, f"{pointer}/{i}") for i, v in enumerate(value)]
    if isinstance(value, float):
        if not math.isfinite(value):
            raise CanonicalizationError.unsupported(pointer, value)
        return int(value) if value.is_integer() else value
    if value is None or isinstance(value, (str, bool, int)):
        return value
    raise CanonicalizationError.unsupported(pointer, value)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def canonicalize(tree: Any, ignore: Iterable[DigestFeature] = ()) -> Any:
    """Return a normalized copy of *tree*.

    Entries are filtered after their own value has been normalized, so an
    object that becomes empty through filtering is itself subject to
    :attr:`DigestFeature.IGNORE_EMPTY_OBJECT`.

    Raises
    ------
    CanonicalizationError
        If *tree* holds anything that is not JSON (NaN, sets, non-string
        keys, ...).
    """
    return _normalize(tree, frozenset(DigestFeature(f) for f in ignore), "")


def canonical_serialize(tree: Any, ignore: Iterable[DigestFeature] = ()) -> bytes:
    """Serialize *tree* to canonical compact JSON bytes."""
    return json.dumps(
        canonicalize(tree, ignore),
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode("utf-8")


def json_digest(
    tree: Any,
    algorithm: str = "sha256",
    ignore: Iterable[DigestFeature] = (),
) -> str:
    """Hex digest of the canonical serialization of *tree*.

    Parameters
    ----------
    tree : Any
        A JSON-shaped value.
    algorithm : str
        Any name accepted by :func:`hashlib.new`.
    ignore : iterable of DigestFeature
        Object entries to drop before hashing.
    """
    h = hashlib.new(algorithm)
    h.update(canonical_serialize(tree, ignore))
    return h.hexdigest()


def digest_equal(a: Any, b: Any, ignore: Iterable[DigestFeature] = ()) -> bool:
    """True when *a* and *b* are the same JSON tree up to object key order."""
    ignore = tuple(ignore)
    return json_digest(a, ignore=ignore) == json_digest(b, ignore=ignore)
