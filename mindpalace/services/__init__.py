"""Services Layer - orchestration between the in-memory store and the durable store.

Invariants:
    - Only services/ schedules durable writes
    - Ordinary mutations persist fire-and-forget; import and reset await their writes
"""
