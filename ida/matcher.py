# Copyright (c) Rich Connexions Ltd. All rights reserved.
# Licensed under the MIT License. See LICENSE for details.

"""Scalar value matching for ``value``, ``values`` and ``max_age``.

:class:`ValueMatcher` decides whether one actual dataset value satisfies
one :class:`~ida.constraint.ConstraintNode`. The reference instant used for
``max_age`` is bound at construction so that a matcher never reads the
wall clock itself.

Date and datetime values are parsed by trying an ordered list of formats
and taking the first that succeeds:

* ``YYYY-MM-DD`` (midnight UTC)
* ``YYYY-MM-DDThh:mm[:ss[.fffffffff]]`` with an offset of ``Z``,
  ``+hh``, ``+hhmm`` or ``+hh:mm``
* the same without an offset (taken as UTC)

Fractions finer than a microsecond are truncated. Anything else is a
non-match, never an error.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from ida.constraint import (
    AllOf,
    ConstraintNode,
    ExactValue,
    MaxAge,
    NoConstraint,
    ValueSet,
)

__all__ = [
    "ABSENT",
    "DATE_FORMAT",
    "DATETIME_FORMATS",
    "ValueMatcher",
    "parse_instant",
    "values_equal",
]


class _Absent:
    """Marker for a claim that does not exist in the dataset."""

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()

DATE_FORMAT = "%Y-%m-%d"

# Order matters: offset-bearing forms first, then local forms.
DATETIME_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
)

# strptime accepts single-digit fields; require the zero-padded shape first.
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_DATETIME_RE = re.compile(
    r"^(?P<stamp>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(?::\d{2})?)"
    r"(?:\.(?P<fraction>\d{1,9}))?"
    r"(?P<offset>Z|[+-]\d{2}(?::?\d{2})?)?$"
)


def _strptime_text(match: "re.Match[str]") -> str:
    # %f takes at most microseconds and %z needs minutes.
    text = match.group("stamp")
    fraction = match.group("fraction")
    if fraction:
        text += "." + fraction[:6]
    offset = match.group("offset") or ""
    if len(offset) == 3:
        offset += "00"
    return text + offset


def parse_instant(value: Any) -> Optional[datetime]:
    """Parse *value* as a date or datetime and return an aware UTC instant.

    Returns None when *value* is not a string, matches none of the
    accepted formats, or names an instant that falls outside the range
    :class:`datetime` can hold once moved to UTC.
    """
    if not isinstance(value, str):
        return None

    if _DATE_RE.match(value):
        try:
            return datetime.strptime(value, DATE_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            return None

    match = _DATETIME_RE.match(value)
    if match is None:
        return None
    text = _strptime_text(match)

    for fmt in DATETIME_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=timezone.utc)
        try:
            return parsed.astimezone(timezone.utc)
        except (OverflowError, ValueError):
            return None

    return None


def values_equal(actual: Any, expected: Any) -> bool:
    """JSON-native scalar equality.

    Booleans only equal booleans (``True`` is not ``1``), numbers compare
    by value across int/float, strings by content. Composite values never
    match.
    """
    if isinstance(actual, (dict, list)) or isinstance(expected, (dict, list)):
        return False
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual == expected
    if actual is None or expected is None:
        return actual is None and expected is None
    if isinstance(actual, (int, float)) and isinstance(expected, (int, float)):
        return actual == expected
    if isinstance(actual, str) and isinstance(expected, str):
        return actual == expected
    return False


class ValueMatcher:
    """Evaluate scalar constraints against actual dataset values."""

    def __init__(self, reference_time: datetime):
        if reference_time.tzinfo is None:
            reference_time = reference_time.replace(tzinfo=timezone.utc)
        self._reference_time = reference_time

    @property
    def reference_time(self) -> datetime:
        return self._reference_time

    def matches(self, actual: Any, constraint: ConstraintNode) -> bool:
        """Return True when *actual* satisfies *constraint*.

        *actual* may be :data:`ABSENT`, which matches nothing. An explicit
        JSON ``null`` is present and satisfies :class:`NoConstraint`.
        Structural variants (sub-requests, template lists) and malformed
        constraints never match a scalar.
        """
        if actual is ABSENT:
            return False

        if isinstance(constraint, NoConstraint):
            return True

        if isinstance(constraint, ExactValue):
            return values_equal(actual, constraint.expected)

        if isinstance(constraint, ValueSet):
            return any(values_equal(actual, option) for option in constraint.options)

        if isinstance(constraint, MaxAge):
            return self._within_max_age(actual, constraint.seconds)

        if isinstance(constraint, AllOf):
            return all(self.matches(actual, c) for c in constraint.constraints)

        return False

    def _within_max_age(self, actual: Any, seconds: int) -> bool:
        instant = parse_instant(actual)
        if instant is None:
            return False
        try:
            limit = timedelta(seconds=seconds)
        except OverflowError:
            # Larger than any representable age.
            return True
        try:
            elapsed = self._reference_time - instant
        except OverflowError:
            return False
        return elapsed <= limit
