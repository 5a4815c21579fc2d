# Copyright (c) Rich Connexions Ltd. All rights reserved.
# Licensed under the MIT License. See LICENSE for details.

"""Claims-request constraint model per OIDC4IDA §6 and OIDC Core §5.5.1.

Each entry in a ``verified_claims`` request is either ``null``, a JSON
object carrying constraint keywords and/or nested claim names, or (for
repeated structures such as ``evidence``) an array of request templates.
:func:`parse_constraint` classifies one such entry into exactly one
:class:`ConstraintNode` variant.

Keyword handling
----------------
* ``value`` / ``values`` / ``max_age`` gate inclusion of scalar data.
  When several appear together every one of them must hold (:class:`AllOf`).
* ``essential`` / ``purpose`` are informational and never gate inclusion.
* Any other key turns the entry into a nested :class:`SubRequest`, unless
  a scalar keyword is also present, in which case the scalar constraint
  wins and the nested keys are recorded in ``ignored``.

A well-formed-JSON but semantically odd entry (``values`` not an array,
negative ``max_age``, a bare string) becomes :class:`Malformed`, which
never matches. Parsing never raises.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from ida.config import (
    KEY_ESSENTIAL,
    KEY_MAX_AGE,
    KEY_PURPOSE,
    KEY_VALUE,
    KEY_VALUES,
    RESERVED_CONSTRAINT_KEYS,
)

__all__ = [
    "ConstraintNode",
    "NoConstraint",
    "ExactValue",
    "ValueSet",
    "MaxAge",
    "AllOf",
    "SubRequest",
    "TemplateList",
    "Malformed",
    "parse_constraint",
]

_SCALAR_TYPES = (str, int, float, bool, type(None))


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConstraintNode:
    """Base of all constraint variants.

    Attributes:
        essential: The ``essential`` flag when given as a boolean.
        purpose:   The ``purpose`` annotation when given as a string.
        ignored:   Nested claim names shadowed by a scalar constraint.
    """

    essential: Optional[bool] = None
    purpose: Optional[str] = None
    ignored: Tuple[str, ...] = ()

    def summary(self) -> str:
        return "{}"


@dataclass(frozen=True)
class NoConstraint(ConstraintNode):
    """Presence-only request (``null``, ``{}`` or modifiers only)."""


@dataclass(frozen=True)
class ExactValue(ConstraintNode):
    expected: Any = None

    def summary(self) -> str:
        return f"{{value={_render(self.expected)}}}"


@dataclass(frozen=True)
class ValueSet(ConstraintNode):
    options: Tuple[Any, ...] = ()

    def summary(self) -> str:
        return "{values=[" + ",".join(_render(o) for o in self.options) + "]}"


@dataclass(frozen=True)
class MaxAge(ConstraintNode):
    seconds: int = 0

    def summary(self) -> str:
        return f"{{max_age={self.seconds}}}"


@dataclass(frozen=True)
class AllOf(ConstraintNode):
    """Conjunction of scalar constraints given on the same claim."""

    constraints: Tuple[ConstraintNode, ...] = ()

    def summary(self) -> str:
        return "{" + ",".join(c.summary()[1:-1] for c in self.constraints) + "}"


@dataclass(frozen=True)
class SubRequest(ConstraintNode):
    """Nested request: claim names mapped to their raw request entries."""

    members: Dict[str, Any] = field(default_factory=dict)

    def summary(self) -> str:
        return "{object}"


@dataclass(frozen=True)
class TemplateList(ConstraintNode):
    """Array of request templates linked by logical OR."""

    templates: Tuple[Any, ...] = ()

    def summary(self) -> str:
        return "[array]"


@dataclass(frozen=True)
class Malformed(ConstraintNode):
    reason: str = ""

    def summary(self) -> str:
        return f"{{malformed: {self.reason}}}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _render(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_scalar(value: Any) -> bool:
    return isinstance(value, _SCALAR_TYPES)


def _parse_max_age(raw: Any) -> Optional[int]:
    """Return *raw* as a non-negative whole number of seconds, or None.

    Booleans are rejected even though ``bool`` is a subclass of ``int``.
    A ``float`` is accepted only when it is a whole number (e.g. ``60.0``).
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, float):
        if not raw.is_integer():
            return None
        raw = int(raw)
    if not isinstance(raw, int) or raw < 0:
        return None
    return raw


def _parse_keywords(entry: Dict[str, Any]) -> Tuple[list, Optional[str]]:
    """Collect scalar constraints from *entry*.

    Returns ``(constraints, error)``; *error* is set when a keyword is
    present but unusable.
    """
    constraints: list = []

    if KEY_VALUE in entry:
        expected = entry[KEY_VALUE]
        if not _is_scalar(expected):
            return [], f"'value' must be a scalar, got {type(expected).__name__}"
        constraints.append(ExactValue(expected=expected))

    if KEY_VALUES in entry:
        options = entry[KEY_VALUES]
        if not isinstance(options, list):
            return [], f"'values' must be an array, got {type(options).__name__}"
        if not all(_is_scalar(o) for o in options):
            return [], "'values' must contain scalars only"
        constraints.append(ValueSet(options=tuple(options)))

    if KEY_MAX_AGE in entry:
        seconds = _parse_max_age(entry[KEY_MAX_AGE])
        if seconds is None:
            return [], f"'max_age' must be a non-negative integer, got {entry[KEY_MAX_AGE]!r}"
        constraints.append(MaxAge(seconds=seconds))

    return constraints, None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_constraint(entry: Any) -> ConstraintNode:
    """Classify one claims-request entry.

    Parameters:
        entry: The raw JSON value found under a claim name in the request.

    Returns:
        The matching :class:`ConstraintNode` variant. Never raises.
    """
    if entry is None:
        return NoConstraint()

    if isinstance(entry, list):
        return TemplateList(templates=tuple(entry))

    if not isinstance(entry, dict):
        return Malformed(
            reason=f"request entry must be null, an object or an array, got {type(entry).__name__}"
        )

    essential = entry.get(KEY_ESSENTIAL)
    purpose = entry.get(KEY_PURPOSE)
    modifiers = {
        "essential": essential if isinstance(essential, bool) else None,
        "purpose": purpose if isinstance(purpose, str) else None,
    }
    nested = {k: v for k, v in entry.items() if k not in RESERVED_CONSTRAINT_KEYS}

    constraints, error = _parse_keywords(entry)
    if error is not None:
        return Malformed(reason=error, **modifiers)

    if constraints:
        ignored = tuple(nested)
        if len(constraints) == 1:
            return replace(constraints[0], ignored=ignored, **modifiers)
        return AllOf(constraints=tuple(constraints), ignored=ignored, **modifiers)

    if nested:
        return SubRequest(members=nested, **modifiers)

    return NoConstraint(**modifiers)
