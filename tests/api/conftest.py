"""API test fixtures - started MindPalace over in-memory SQLite + FastAPI test client.

Invariants:
    - Every test gets its own palace; nothing persists between tests
    - get_palace dependency overridden, so the app lifespan is never needed

Design Decisions:
    - httpx ASGITransport drives the app in-process (no server, no lifespan events)
"""

import pytest
from httpx import ASGITransport, AsyncClient

from mindpalace.api.dependencies import get_palace
from mindpalace.config import Settings
from mindpalace.infrastructure.file_transfer import MemoryFileSaver
from mindpalace.main import app
from mindpalace.services.palace import MindPalace


@pytest.fixture
async def palace(frozen_ids):
    handle = MindPalace(
        Settings(database_url="sqlite+aiosqlite:///:memory:"),
        saver=MemoryFileSaver(),
        id_source=frozen_ids,
    )
    await handle.start()
    yield handle
    await handle.close()


@pytest.fixture
async def client(palace):
    """FastAPI test client wired to the palace fixture."""
    app.dependency_overrides[get_palace] = lambda: palace
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()
