"""Shelf Record ORM - durable partitions and the shelf records they hold.

Invariants:
    - A partition is a named namespace; shelf ids are unique within one partition
    - position is the shelf's index in the collection at write time
    - items is the shelf's item list as wire-format JSON, order preserved

Design Decisions:
    - One shelves table keyed by (partition, id) instead of one table per partition:
      new partitions need no DDL beyond a row in partitions
    - BigInteger ids: creation-time ids are epoch milliseconds
    - Explicit position column: load order never depends on the engine's key order
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mindpalace.db.base import Base


class PartitionRecord(Base):
    """A registered partition name."""
    __tablename__ = "partitions"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class ShelfRecord(Base):
    """One shelf of one collection."""
    __tablename__ = "shelves"

    partition: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("partitions.name", ondelete="CASCADE"),
        primary_key=True,
    )
    id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def to_record(self) -> dict:
        return {"id": self.id, "title": self.title, "items": self.items}
