"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - ShelfId and ItemId are ints, unique within one collection (collections share no id space)
    - Every collection maps to exactly one durable partition and one snapshot key
    - All valid states encoded as Enums - no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
    - Snapshot keys keep the historical "cafe"/"audio" names so old backups import
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ShelfId = NewType("ShelfId", int)
ItemId = NewType("ItemId", int)


# ─── Constants ───────────────────────────────────────────────────

SNAPSHOT_VERSION = 1


# ─── Enums ───────────────────────────────────────────────────────

class CollectionKind(str, Enum):
    """The two independent collections; the value is the snapshot key."""
    INGREDIENT = "cafe"
    MEDIA = "audio"

    @property
    def partition(self) -> str:
        """Durable partition owned by this collection."""
        return f"{self.value}_shelves"


class Roast(str, Enum):
    """Roast level of an ingredient item."""
    LIGHT = "Light"
    MEDIUM = "Medium"
    DARK = "Dark"
    OMNI = "Omni"


class ChangeOrigin(str, Enum):
    """Why a collection changed - decides whether write-through applies."""
    MUTATION = "mutation"   # user-driven edit, written through
    LOAD = "load"           # startup load result, never written back
    FORCED = "forced"       # import/reset, persisted and awaited by the caller
