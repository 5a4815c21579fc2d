# Copyright (c) Rich Connexions Ltd. All rights reserved.
# Licensed under the MIT License. See LICENSE for details.
"""Shared test fixtures for the identity-assurance extraction test suite.

Provides a fixed reference instant, the OIDC4IDA
``evidence_with_assurance_details`` example dataset, and an extractor
factory bound to that instant.
"""

from __future__ import annotations

import copy
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

from ida.extractor import DatasetExtractor

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# max_age is measured against this instant throughout the suite.
REFERENCE_TIME = datetime(2022, 4, 1, 0, 0, 0, tzinfo=timezone.utc)


def load_fixture(name: str) -> Dict[str, Any]:
    with open(FIXTURES_DIR / name, encoding="utf-8") as f:
        return json.load(f)


_EVIDENCE_WITH_ASSURANCE_DETAILS = load_fixture("evidence_with_assurance_details.json")


# =========================================================================
# Datasets
# =========================================================================

@pytest.fixture
def userinfo() -> Dict[str, Any]:
    """The full example UserInfo response, ``verified_claims`` envelope included."""
    return copy.deepcopy(_EVIDENCE_WITH_ASSURANCE_DETAILS)


@pytest.fixture
def original(userinfo) -> Dict[str, Any]:
    """The content of ``verified_claims`` from the example response.

    Returns a fresh copy per test so that mutation checks are meaningful.
    """
    return userinfo["verified_claims"]


# =========================================================================
# Extractors
# =========================================================================

@pytest.fixture
def reference_time() -> datetime:
    return REFERENCE_TIME


@pytest.fixture
def make_extractor() -> Callable[..., DatasetExtractor]:
    """Factory for extractors pinned to :data:`REFERENCE_TIME`.

    Keyword arguments are passed through to :class:`DatasetExtractor`.
    """

    def _make(**kwargs: Any) -> DatasetExtractor:
        kwargs.setdefault("reference_time", REFERENCE_TIME)
        return DatasetExtractor(**kwargs)

    return _make


@pytest.fixture
def extractor(make_extractor) -> DatasetExtractor:
    return make_extractor()
