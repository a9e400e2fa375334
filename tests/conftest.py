from __future__ import annotations

import os

import pytest

DEFAULT_SEED = int(os.getenv("NNVIZ_TEST_SEED", "1234"))


@pytest.fixture
def graph_seed() -> int:
    """Base seed for randomly generated operation graphs."""
    return DEFAULT_SEED
