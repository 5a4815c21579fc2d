# Copyright (c) Rich Connexions Ltd. All rights reserved.
# Licensed under the MIT License. See LICENSE for details.

"""Matching of request templates against repeated dataset structures.

OIDC4IDA §6.2 (Requesting Verification Data): a single entry in the
``evidence`` request array is a filter over evidence elements, and several
entries are linked by a logical OR. The same rule is applied to every
array-valued property, not just ``evidence``.

Each dataset element is evaluated independently; template positions are
not correlated with element positions. An element is kept, projected to
the fields of the first template it satisfies, and the original element
order is preserved. A failed constraint anywhere inside an element drops
that element only.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Sequence

from ida.context import ExtractionContext, Outcome
from ida.messages import Diagnostics, MessageCode

__all__ = ["ArrayMatcher", "ProjectFn"]

# (request template, dataset element, context) -> Outcome
ProjectFn = Callable[[Dict[str, Any], Dict[str, Any], ExtractionContext], Outcome]


class ArrayMatcher:
    """Filter and project dataset arrays through request templates.

    The per-field projection is delegated to *project*, which the
    extractor supplies so that array elements follow the same per-key
    rules as any other mapping.
    """

    def __init__(self, project: ProjectFn, diagnostics: Diagnostics):
        self._project = project
        self._diag = diagnostics

    def match(
        self,
        templates: Sequence[Any],
        elements: Sequence[Any],
        context: ExtractionContext,
    ) -> List[Dict[str, Any]]:
        """Return projections of the *elements* that satisfy any template."""
        usable = []
        for t_index, template in enumerate(templates):
            if isinstance(template, dict):
                usable.append((t_index, template))
            else:
                self._diag.warning(
                    context, template, elements, MessageCode.DE12, request_index=t_index,
                )

        matched: List[Dict[str, Any]] = []
        if not usable:
            return matched

        for e_index, element in enumerate(elements):
            if not isinstance(element, dict):
                self._diag.warning(
                    context, templates, element, MessageCode.DE13, dataset_index=e_index,
                )
                continue

            for t_index, template in usable:
                outcome = self._project(template, element, context.element(e_index, t_index))
                if outcome.emitted:
                    matched.append(outcome.value)
                    break
            else:
                self._diag.debug(
                    context, templates, element, MessageCode.DE14, dataset_index=e_index,
                )

        return matched

    def first_match(
        self,
        template: Dict[str, Any],
        elements: Sequence[Any],
        context: ExtractionContext,
    ) -> Outcome:
        """Project the first element of *elements* that satisfies *template*.

        Used when the request holds a single object where the dataset holds
        an array. Returns an OMIT outcome when no element qualifies.
        """
        for e_index, element in enumerate(elements):
            if not isinstance(element, dict):
                self._diag.warning(
                    context, template, element, MessageCode.DE13, dataset_index=e_index,
                )
                continue
            outcome = self._project(template, element, context.element(e_index))
            if outcome.emitted:
                return outcome
        return Outcome.omit()
