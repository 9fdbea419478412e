"""Shelf Schemas - pydantic records for both collections plus API request bodies.

Invariants:
    - Wire/durable/snapshot names are camelCase aliases (colorFrom, coverUrl, isFavorite)
    - Both alias and attribute names are accepted on input (populate_by_name)
    - to_record() drops None fields so absent optionals stay absent across round trips
    - Shelf and item ids fit a signed 64-bit integer (the durable BIGINT key)

Design Decisions:
    - One shelf class per collection: the items list is typed per collection, so a
      media record can never validate into the ingredient collection
    - Records are plain mutable models; core/shelf_ops.py clones before every change
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mindpalace.core.domain_types import CollectionKind, Roast

RecordId = Annotated[int, Field(ge=-(2**63), le=2**63 - 1)]


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_record(self) -> dict:
        """JSON-safe dict using wire names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class IngredientItem(_Record):
    """A coffee bean on an ingredient shelf."""
    id: RecordId
    name: str
    region: str = ""
    process: str = ""
    notes: str = ""
    color_from: str = Field("#a8a29e", alias="colorFrom")
    color_to: str = Field("#44403c", alias="colorTo")
    roast: Roast = Roast.MEDIUM


class MediaItem(_Record):
    """An album on a media shelf. cover_url may be a URL or an inline data URI."""
    id: RecordId
    title: str
    artist: str = ""
    cover_url: str = Field("", alias="coverUrl")
    track_url: str = Field("", alias="trackUrl")
    year: str = ""
    description: str | None = None
    is_favorite: bool | None = Field(None, alias="isFavorite")

    @field_validator("year", mode="before")
    @classmethod
    def coerce_year(cls, v: object) -> object:
        """Older backups stored the year as a number."""
        return str(v) if isinstance(v, int) else v


class IngredientShelf(_Record):
    id: RecordId
    title: str
    items: list[IngredientItem] = Field(default_factory=list)


class MediaShelf(_Record):
    id: RecordId
    title: str
    items: list[MediaItem] = Field(default_factory=list)


Shelf = IngredientShelf | MediaShelf
Item = IngredientItem | MediaItem

_SHELF_MODELS: dict[CollectionKind, type[IngredientShelf] | type[MediaShelf]] = {
    CollectionKind.INGREDIENT: IngredientShelf,
    CollectionKind.MEDIA: MediaShelf,
}
_ITEM_MODELS: dict[CollectionKind, type[IngredientItem] | type[MediaItem]] = {
    CollectionKind.INGREDIENT: IngredientItem,
    CollectionKind.MEDIA: MediaItem,
}


def shelf_model_for(kind: CollectionKind) -> type[IngredientShelf] | type[MediaShelf]:
    return _SHELF_MODELS[kind]


def item_model_for(kind: CollectionKind) -> type[IngredientItem] | type[MediaItem]:
    return _ITEM_MODELS[kind]


# --- API request bodies -------------------------------------------------------

class ShelfCreate(BaseModel):
    """New shelf - title falls back to the collection's template title."""
    title: str | None = Field(None, max_length=200)


class ShelfRename(BaseModel):
    title: str = Field(min_length=1, max_length=200)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty or whitespace")
        return v


class MoveRequest(BaseModel):
    """Drag-and-drop move between media shelves; target_index None appends."""
    source_shelf_id: int
    source_index: int
    target_shelf_id: int
    target_index: int | None = None


class ResetRequest(BaseModel):
    confirm: bool = False
