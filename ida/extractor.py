# Copyright (c) Rich Connexions Ltd. All rights reserved.
# Licensed under the MIT License. See LICENSE for details.

"""Selective disclosure of verified claims per OIDC4IDA §6 and §7.

:class:`DatasetExtractor` walks a ``verified_claims`` request and an
original dataset in lockstep and builds a new tree holding only the data
that was requested and that satisfies the request's constraints.

Omission rules (OIDC4IDA §6.5.1, "Data not Matching Requirements"):

* a failed ``value`` / ``values`` / ``max_age`` constraint anywhere under
  ``verification`` omits the whole result;
* under ``claims`` it omits only the claim it is attached to;
* inside an element of a filtered array it drops only that element.

Absent claims are simply left out, whatever ``essential`` says.

Usage::

    extractor = DatasetExtractor(reference_time=datetime(2022, 4, 1, tzinfo=timezone.utc))
    dataset = extractor.extract(request, original)
    if dataset is None:
        ...  # nothing may be disclosed
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Optional, Union

from ida import config
from ida.array_matcher import ArrayMatcher
from ida.config import (
    KEY_ASSURANCE_DETAILS,
    KEY_ASSURANCE_PROCESS,
    KEY_CLAIMS,
    KEY_VERIFICATION,
    PREDEFINED_TRANSFORMED_CLAIM_PREFIX,
    RESERVED_CONSTRAINT_KEYS,
    TRANSFORMED_CLAIM_PREFIX,
)
from ida.constraint import (
    Malformed,
    NoConstraint,
    SubRequest,
    TemplateList,
    parse_constraint,
)
from ida.context import Branch, ExtractionContext, Outcome
from ida.exceptions import RecursionCeilingError
from ida.loader import parse_json_object, unwrap_verified_claims
from ida.matcher import ABSENT, ValueMatcher
from ida.messages import Diagnostics, MessageCode

__all__ = ["DatasetExtractor"]

log = logging.getLogger(__name__)

_ROOT_BRANCHES = {
    KEY_VERIFICATION: Branch.VERIFICATION,
    KEY_CLAIMS: Branch.CLAIMS,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _copy_tree(value: Any, context: ExtractionContext) -> Any:
    """Deep-copy a JSON tree, descending *context* so the depth ceiling applies."""
    if isinstance(value, dict):
        return {k: _copy_tree(v, context.descend(str(k))) for k, v in value.items()}
    if isinstance(value, list):
        return [_copy_tree(v, context.descend(str(i))) for i, v in enumerate(value)]
    return value


class DatasetExtractor:
    """Extract the requested subset of a verified-claims dataset.

    Args:
        reference_time: Instant ``max_age`` is measured against. Read from
            *clock* once, here, when omitted. A naive value is taken as UTC.
        transformed_claim_aware: Pass ``:name`` / ``::name`` claims through
            (True) or drop them (False). Defaults to
            :data:`ida.config.TRANSFORMED_CLAIM_AWARE`.
        logger: Destination for diagnostics. Defaults to this module's logger.
        max_depth: Nesting ceiling. Defaults to
            :data:`ida.config.MAX_RECURSION_DEPTH`.
        clock: Zero-argument callable returning an aware datetime.

    An instance holds no per-call state and may be shared between threads.
    """

    def __init__(
        self,
        reference_time: Optional[datetime] = None,
        *,
        transformed_claim_aware: Optional[bool] = None,
        logger: Optional[logging.Logger] = None,
        max_depth: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if reference_time is None:
            reference_time = (clock or _utcnow)()
        if reference_time.tzinfo is None:
            reference_time = reference_time.replace(tzinfo=timezone.utc)

        if transformed_claim_aware is None:
            transformed_claim_aware = config.TRANSFORMED_CLAIM_AWARE
        if max_depth is None:
            max_depth = config.MAX_RECURSION_DEPTH

        self._matcher = ValueMatcher(reference_time)
        self._transformed_claim_aware = bool(transformed_claim_aware)
        self._max_depth = max_depth
        self._diag = Diagnostics(logger or log)
        self._arrays = ArrayMatcher(self._project_mapping, self._diag)

    @property
    def reference_time(self) -> datetime:
        return self._matcher.reference_time

    @property
    def transformed_claim_aware(self) -> bool:
        return self._transformed_claim_aware

    @property
    def max_depth(self) -> int:
        return self._max_depth

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def extract(self, request: Any, original: Any) -> Optional[Dict[str, Any]]:
        """Return the filtered dataset, or None when nothing may be disclosed.

        *request* is the content of one ``verified_claims`` request and
        *original* the content of one ``verified_claims`` dataset. Neither
        is modified and the result shares no objects with either.

        Never raises for JSON-shaped input.
        """
        if not isinstance(request, dict) or not isinstance(original, dict):
            self._diag.debug(
                ExtractionContext(Branch.CLAIMS, self._max_depth),
                request, original, MessageCode.DE19,
            )
            return None

        try:
            return self._extract_root(request, original)
        except RecursionCeilingError as e:
            self._diag.logger.warning("%s: %s (%s)", MessageCode.DE18.value, MessageCode.DE18.message, e.message)
            return None

    def extract_first(
        self, request: Any, originals: Iterable[Any],
    ) -> Optional[Dict[str, Any]]:
        """Extract from the first of *originals* that satisfies *request*.

        A subject may hold several ``verified_claims`` records (OIDC4IDA §5.2
        allows an array). Non-object entries are skipped.
        """
        for original in originals:
            if not isinstance(original, dict):
                continue
            dataset = self.extract(request, original)
            if dataset is not None:
                return dataset
        return None

    def extract_json(
        self, request: Union[str, bytes], original: Union[str, bytes],
    ) -> Optional[Dict[str, Any]]:
        """Decode JSON text and extract.

        Either document may be wrapped in a ``verified_claims`` envelope.
        When the dataset envelope holds an array, the first satisfying
        record is used.

        Raises:
            InputDecodingError: Either text is not a JSON object.
        """
        request_tree = unwrap_verified_claims(parse_json_object(request, "request"))
        dataset_tree = unwrap_verified_claims(parse_json_object(original, "dataset"))
        if isinstance(dataset_tree, list):
            return self.extract_first(request_tree, dataset_tree)
        return self.extract(request_tree, dataset_tree)

    # ------------------------------------------------------------------
    # Recursion
    # ------------------------------------------------------------------

    def _extract_root(self, request: Dict[str, Any], original: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        result: Dict[str, Any] = {}

        for key, entry in request.items():
            branch = _ROOT_BRANCHES.get(key)
            root = ExtractionContext(branch or Branch.CLAIMS, self._max_depth)
            if branch is None:
                self._diag.warning(root.descend(key), entry, original.get(key, ABSENT), MessageCode.DE16)
                continue

            context = root.descend(key)
            outcome = self._process_entry(key, entry, original, context)
            if outcome.rejected:
                self._diag.debug(context, entry, original.get(key, ABSENT), MessageCode.DE15)
                return None
            if outcome.emitted:
                result[key] = outcome.value

        return result or None

    def _project_mapping(
        self, members: Dict[str, Any], node: Dict[str, Any], context: ExtractionContext,
    ) -> Outcome:
        """Project *node* through the request *members*.

        A REJECT from any member is returned as is. A projection that ends
        up empty is an OMIT; an empty object is never emitted.
        """
        result: Dict[str, Any] = {}

        for key, entry in members.items():
            if key in RESERVED_CONSTRAINT_KEYS:
                continue
            outcome = self._process_entry(key, entry, node, context.descend(key))
            if outcome.rejected:
                return outcome
            if outcome.emitted:
                result[key] = outcome.value

        if not result:
            self._diag.debug(context, members, node, MessageCode.DE17)
            return Outcome.omit()
        return Outcome.emit(result)

    def _process_entry(
        self, key: str, entry: Any, node: Dict[str, Any], context: ExtractionContext,
    ) -> Outcome:
        """Decide what goes under *key*, given its request *entry* and the
        dataset mapping *node* that would hold it."""
        if key.startswith(TRANSFORMED_CLAIM_PREFIX):
            return self._transformed_claim(key, entry, context)

        actual = node.get(key, ABSENT)
        if actual is ABSENT:
            self._diag.debug(context, entry, actual, MessageCode.DE03)
            return Outcome.omit()

        if (
            key == KEY_ASSURANCE_DETAILS
            and context.dataset_path[-2:-1] == (KEY_ASSURANCE_PROCESS,)
            and isinstance(actual, list)
        ):
            # OIDC4IDA §6.2: requested assurance_details are returned whole.
            self._diag.debug(context, entry, actual, MessageCode.DE04)
            return Outcome.emit(_copy_tree(actual, context))

        constraint = parse_constraint(entry)

        if isinstance(constraint, Malformed):
            self._diag.warning(context, constraint, actual, MessageCode.DE05)
            return self._fail(context)

        if isinstance(constraint, SubRequest):
            return self._sub_request(constraint, actual, context)

        if isinstance(constraint, TemplateList):
            return self._template_list(constraint, actual, context)

        if isinstance(actual, (dict, list)):
            if isinstance(constraint, NoConstraint):
                self._diag.debug(context, constraint, actual, MessageCode.DE07)
                return Outcome.omit()
            self._diag.warning(context, constraint, actual, MessageCode.DE08)
            return self._fail(context)

        if self._matcher.matches(actual, constraint):
            return Outcome.emit(actual)

        self._diag.debug(context, constraint, actual, MessageCode.DE06)
        return self._fail(context)

    def _transformed_claim(self, key: str, entry: Any, context: ExtractionContext) -> Outcome:
        if not self._transformed_claim_aware:
            self._diag.debug(context, entry, ABSENT, MessageCode.DE02)
            return Outcome.omit()

        self._diag.debug(context, entry, ABSENT, MessageCode.DE01)
        if key.startswith(PREDEFINED_TRANSFORMED_CLAIM_PREFIX):
            return Outcome.emit(_copy_tree(entry, context))
        return Outcome.emit(None)

    def _sub_request(self, constraint: SubRequest, actual: Any, context: ExtractionContext) -> Outcome:
        if isinstance(actual, dict):
            return self._project_mapping(constraint.members, actual, context)

        if isinstance(actual, list):
            outcome = self._arrays.first_match(constraint.members, actual, context)
            if outcome.emitted:
                return outcome
            self._diag.debug(context, constraint, actual, MessageCode.DE10)
            return self._nothing_matched(context)

        self._diag.warning(context, constraint, actual, MessageCode.DE08)
        return self._fail(context)

    def _template_list(self, constraint: TemplateList, actual: Any, context: ExtractionContext) -> Outcome:
        if isinstance(actual, dict):
            elements = [actual]
        elif isinstance(actual, list):
            elements = actual
        else:
            self._diag.warning(context, constraint, actual, MessageCode.DE09)
            return self._fail(context)

        matched = self._arrays.match(constraint.templates, elements, context)
        if not matched:
            self._diag.debug(context, constraint, actual, MessageCode.DE11)
            return self._nothing_matched(context)
        return Outcome.emit(matched)

    @staticmethod
    def _fail(context: ExtractionContext) -> Outcome:
        return Outcome.reject() if context.strict else Outcome.omit()

    @staticmethod
    def _nothing_matched(context: ExtractionContext) -> Outcome:
        # A filtered array that loses every element only sinks the
        # enclosing element, never a whole branch.
        return Outcome.reject() if context.in_element else Outcome.omit()
