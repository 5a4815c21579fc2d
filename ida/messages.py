# Copyright (c) Rich Connexions Ltd. All rights reserved.
# Licensed under the MIT License. See LICENSE for details.
"""Diagnostic message codes and the pointer-prefixed log helper.

Every diagnostic line looks like::

    <request:/claims/given_name={value="Unknown"}, original:/claims/given_name="Sarah"> DE06: ...

so that a line can be traced back to the exact request entry and dataset
node without the full trees being logged.
"""

import json
import logging
from enum import Enum
from typing import Any, Optional

from ida.constraint import ConstraintNode
from ida.context import ExtractionContext


class MessageCode(str, Enum):
    """Stable identifiers for extractor diagnostics."""

    DE01 = "DE01"
    DE02 = "DE02"
    DE03 = "DE03"
    DE04 = "DE04"
    DE05 = "DE05"
    DE06 = "DE06"
    DE07 = "DE07"
    DE08 = "DE08"
    DE09 = "DE09"
    DE10 = "DE10"
    DE11 = "DE11"
    DE12 = "DE12"
    DE13 = "DE13"
    DE14 = "DE14"
    DE15 = "DE15"
    DE16 = "DE16"
    DE17 = "DE17"
    DE18 = "DE18"
    DE19 = "DE19"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    MessageCode.DE01: "Transformed claim passed through without dataset lookup.",
    MessageCode.DE02: "Transformed claim skipped because transformed claims are not supported.",
    MessageCode.DE03: "The requested claim is absent from the dataset; omitted.",
    MessageCode.DE04: "assurance_details copied in full regardless of the request.",
    MessageCode.DE05: "The request entry is malformed and cannot match anything.",
    MessageCode.DE06: "The dataset value does not satisfy the constraint.",
    MessageCode.DE07: "Composite value requested without a sub-request; omitted for data minimisation.",
    MessageCode.DE08: "The request entry and the dataset value have incompatible shapes.",
    MessageCode.DE09: "A template array was requested but the dataset value is a scalar.",
    MessageCode.DE10: "No element of the dataset array satisfies the sub-request.",
    MessageCode.DE11: "No element of the dataset array satisfies any template.",
    MessageCode.DE12: "A template in the request array is not an object; ignored.",
    MessageCode.DE13: "An element of the dataset array is not an object; ignored.",
    MessageCode.DE14: "The array element satisfies no template; dropped.",
    MessageCode.DE15: "A verification constraint failed; the whole result is omitted.",
    MessageCode.DE16: "Unknown top-level request key; ignored.",
    MessageCode.DE17: "The nested sub-request produced nothing; omitted.",
    MessageCode.DE18: "Nesting depth ceiling exceeded; the whole result is omitted.",
    MessageCode.DE19: "Extraction input is not a JSON object; nothing extracted.",
}


def render(value: Any) -> str:
    """Compact one-token rendering of a request or dataset value."""
    if isinstance(value, ConstraintNode):
        return value.summary()
    if isinstance(value, dict):
        return "{object}"
    if isinstance(value, list):
        return "[array]"
    if isinstance(value, (str, int, float, bool)) or value is None:
        return json.dumps(value, ensure_ascii=False)
    # ABSENT and anything else that is not JSON
    return repr(value)


def _pointer(base: str, index: Optional[int]) -> str:
    return base if index is None else f"{base}/{index}"


class Diagnostics:
    """Writes coded diagnostics for one extractor to a logger.

    The prefix is only built when the level is enabled, so a silent
    logger costs a single ``isEnabledFor`` check per event.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def warning(self, context, request_value, dataset_value, code, **indices) -> None:
        self._emit(logging.WARNING, context, request_value, dataset_value, code, **indices)

    def debug(self, context, request_value, dataset_value, code, **indices) -> None:
        self._emit(logging.DEBUG, context, request_value, dataset_value, code, **indices)

    def _emit(
        self,
        level: int,
        context: ExtractionContext,
        request_value: Any,
        dataset_value: Any,
        code: MessageCode,
        request_index: Optional[int] = None,
        dataset_index: Optional[int] = None,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(
            level,
            "<request:%s=%s, original:%s=%s> %s: %s",
            _pointer(context.request_pointer, request_index) or "/",
            render(request_value),
            _pointer(context.dataset_pointer, dataset_index) or "/",
            render(dataset_value),
            code.value,
            code.message,
        )
