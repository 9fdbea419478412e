"""Root conftest - shared test configuration.

Invariants:
    - Tests never touch a durable file unless they ask for one (tmp_path)
    - Ids are deterministic wherever a test compares them
"""

import os

import pytest

from mindpalace.core.id_source import IdSource

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")


@pytest.fixture
def frozen_ids():
    """IdSource whose clock is stuck at 1_700_000_000_000 ms."""
    return IdSource(clock=lambda: 1_700_000_000_000)
