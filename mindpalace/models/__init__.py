"""ORM Models - SQLAlchemy declarative models for the durable store.

Invariants:
    - All models inherit from Base (db/base.py)
    - All models imported here so Base.metadata is complete before create_all runs
"""

from mindpalace.models.shelf_record import PartitionRecord, ShelfRecord  # noqa: F401
