"""Infrastructure Layer - durable store, file collaborators and logging setup.

Invariants:
    - Infrastructure never imports from services/
    - Engine exceptions are mapped to core/errors.py types before leaving this layer
"""
