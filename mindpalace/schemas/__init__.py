"""Pydantic Schemas - shelf/item records and API request bodies.

Invariants:
    - Records validate at every boundary (durable load, snapshot import, API input)
    - Wire names are camelCase aliases; Python attributes are snake_case
"""
