"""Core Layer - pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, models/ or db/
    - Collection values are never mutated in place: every operation returns a new value

Design Decisions:
    - Functional core separated from the imperative shell: the shell (services/) awaits
      the durable store around the synchronous state transitions defined here
"""
