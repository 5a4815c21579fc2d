# Copyright (c) Rich Connexions Ltd. All rights reserved.
# Licensed under the MIT License. See LICENSE for details.

"""Traversal state and per-node results for dataset extraction.

An :class:`ExtractionContext` is an immutable snapshot of where the
extractor is: which top-level branch it descended from, whether it is
inside an array element, how deep it is, and the JSON pointers of the
current request and dataset nodes. Descending returns a new context, so
nothing is restored on the way back up and concurrent extractions share
no state.

Every per-key step produces an :class:`Outcome`:

* ``EMIT``   -- put ``value`` under the key.
* ``OMIT``   -- leave the key out and carry on with its siblings.
* ``REJECT`` -- the enclosing scope cannot be satisfied. Under
  ``verification`` the whole result is dropped; inside an array element
  only that element is dropped.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from ida.exceptions import RecursionCeilingError

__all__ = [
    "Branch",
    "Disposition",
    "Outcome",
    "ExtractionContext",
    "to_pointer",
]


class Branch(str, Enum):
    VERIFICATION = "verification"
    CLAIMS = "claims"


class Disposition(str, Enum):
    EMIT = "emit"
    OMIT = "omit"
    REJECT = "reject"


@dataclass(frozen=True)
class Outcome:
    disposition: Disposition
    value: Any = None

    @classmethod
    def emit(cls, value: Any) -> "Outcome":
        return cls(Disposition.EMIT, value)

    @classmethod
    def omit(cls) -> "Outcome":
        return _OMIT

    @classmethod
    def reject(cls) -> "Outcome":
        return _REJECT

    @property
    def emitted(self) -> bool:
        return self.disposition is Disposition.EMIT

    @property
    def rejected(self) -> bool:
        return self.disposition is Disposition.REJECT


_OMIT = Outcome(Disposition.OMIT)
_REJECT = Outcome(Disposition.REJECT)


def _escape(token: str) -> str:
    # RFC 6901 §3: '~' first, then '/'.
    return token.replace("~", "~0").replace("/", "~1")


def to_pointer(tokens: Tuple[str, ...]) -> str:
    """Render reference tokens as an RFC 6901 JSON pointer."""
    return "".join("/" + _escape(t) for t in tokens)


@dataclass(frozen=True)
class ExtractionContext:
    """Where the extractor currently is.

    Attributes:
        branch:        Top-level branch the node belongs to.
        max_depth:     Nesting ceiling; exceeding it raises
                       :class:`~ida.exceptions.RecursionCeilingError`.
        in_element:    True below an array element being matched.
        depth:         Number of descents from the root.
        request_path:  Reference tokens of the current request node.
        dataset_path:  Reference tokens of the current dataset node.
    """

    branch: Branch
    max_depth: int
    in_element: bool = False
    depth: int = 0
    request_path: Tuple[str, ...] = ()
    dataset_path: Tuple[str, ...] = ()

    @property
    def strict(self) -> bool:
        """Whether a failed constraint rejects the enclosing scope.

        Failures under ``verification`` or inside an array element are
        rejections; elsewhere under ``claims`` they only omit the key.
        """
        return self.branch is Branch.VERIFICATION or self.in_element

    @property
    def key(self) -> str:
        return self.request_path[-1] if self.request_path else ""

    @property
    def request_pointer(self) -> str:
        return to_pointer(self.request_path)

    @property
    def dataset_pointer(self) -> str:
        return to_pointer(self.dataset_path)

    def _checked(self, depth: int) -> int:
        if depth > self.max_depth:
            raise RecursionCeilingError.exceeded(depth, self.request_pointer)
        return depth

    def descend(self, key: str) -> "ExtractionContext":
        return ExtractionContext(
            branch=self.branch,
            max_depth=self.max_depth,
            in_element=self.in_element,
            depth=self._checked(self.depth + 1),
            request_path=self.request_path + (key,),
            dataset_path=self.dataset_path + (key,),
        )

    def element(
        self, element_index: int, template_index: Optional[int] = None,
    ) -> "ExtractionContext":
        """Context for matching dataset array element *element_index*.

        *template_index* is appended to the request pointer when the
        request side is itself an array of templates.
        """
        request_path = self.request_path
        if template_index is not None:
            request_path += (str(template_index),)
        return ExtractionContext(
            branch=self.branch,
            max_depth=self.max_depth,
            in_element=True,
            depth=self._checked(self.depth + 1),
            request_path=request_path,
            dataset_path=self.dataset_path + (str(element_index),),
        )
