"""Database Infrastructure - SQLAlchemy declarative base for the durable store.

Invariants:
    - All ORM models inherit from db.base.Base
"""
