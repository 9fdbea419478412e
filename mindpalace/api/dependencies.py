"""API Dependencies - access to the MindPalace handle created by the lifespan."""

from fastapi import Request

from mindpalace.services.palace import MindPalace


def get_palace(request: Request) -> MindPalace:
    """FastAPI dependency for the running MindPalace handle."""
    palace = getattr(request.app.state, "palace", None)
    if palace is None:
        raise RuntimeError("Mind Palace not started")
    return palace
