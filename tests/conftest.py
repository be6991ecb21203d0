from __future__ import annotations

import itertools
from datetime import date

import pytest

from famtree.store import RelationshipStore


@pytest.fixture()
def fixed_today() -> date:
    # Keep tests deterministic.
    return date(2026, 1, 20)


@pytest.fixture()
def store() -> RelationshipStore:
    # Sequential ids keep ordering (and spouse edge direction) predictable.
    counter = itertools.count(1)
    return RelationshipStore(id_factory=lambda: f"p{next(counter):03d}")
