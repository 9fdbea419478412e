"""Seed Data - built-in default shelves and new-record templates.

Invariants:
    - default_shelves() builds fresh model instances on every call (no shared state
      between two resets)
    - Templates never carry an id: ids are assigned by the collection store
"""

from datetime import datetime

from mindpalace.core.domain_types import CollectionKind
from mindpalace.schemas.shelves import shelf_model_for

_INGREDIENT_SEED: list[dict] = [
    {
        "id": 1,
        "title": "Premium Arabica Collection",
        "items": [
            {
                "id": 101, "name": "Panama Geisha", "region": "Boquete",
                "process": "Washed", "notes": "Jasmine, Bergamot, Honey",
                "colorFrom": "#f472b6", "colorTo": "#be185d", "roast": "Light",
            },
            {
                "id": 102, "name": "Ethiopia Yirgacheffe", "region": "Gedeo",
                "process": "Natural", "notes": "Blueberry, Lemon",
                "colorFrom": "#facc15", "colorTo": "#ea580c", "roast": "Light",
            },
        ],
    },
    {
        "id": 2,
        "title": "Experimental & Blends",
        "items": [
            {
                "id": 201, "name": "Cau Dat Arabica", "region": "Vietnam",
                "process": "Honey", "notes": "Caramel, Chocolate",
                "colorFrom": "#60a5fa", "colorTo": "#1e3a8a", "roast": "Medium",
            },
        ],
    },
]

_MEDIA_SEED: list[dict] = [
    {
        "id": 1,
        "title": "Favorites Playlist",
        "items": [
            {
                "id": 101, "title": "Random Access Memories", "artist": "Daft Punk",
                "coverUrl": "https://upload.wikimedia.org/wikipedia/en/a/a7/Random_Access_Memories.jpg",
                "trackUrl": "https://open.spotify.com/album/4m2880jivSbbyEGqf539qK",
                "year": "2013",
                "description": "A homage to the late 1970s and early 1980s US disco and boogie era.",
                "isFavorite": True,
            },
            {
                "id": 102, "title": "The Dark Side of the Moon", "artist": "Pink Floyd",
                "coverUrl": "https://upload.wikimedia.org/wikipedia/en/3/3b/Dark_Side_of_the_Moon.png",
                "trackUrl": "",
                "year": "1973",
                "description": (
                    "A concept album that explores themes such as conflict, greed, "
                    "time, death, and mental illness."
                ),
            },
        ],
    },
    {
        "id": 2,
        "title": "Late Night Lo-Fi",
        "items": [
            {
                "id": 201, "title": "Nostalgia", "artist": "Various Artists",
                "coverUrl": "https://f4.bcbits.com/img/a1637693293_65",
                "trackUrl": "",
                "year": "2024",
                "description": "Beats to relax and study to.",
            },
        ],
    },
]

_SEEDS: dict[CollectionKind, list[dict]] = {
    CollectionKind.INGREDIENT: _INGREDIENT_SEED,
    CollectionKind.MEDIA: _MEDIA_SEED,
}

_SHELF_TITLES: dict[CollectionKind, str] = {
    CollectionKind.INGREDIENT: "New Shelf",
    CollectionKind.MEDIA: "New Genre",
}


def default_shelves(kind: CollectionKind) -> tuple:
    """Fresh copy of the built-in shelves for one collection."""
    model = shelf_model_for(kind)
    return tuple(model.model_validate(record) for record in _SEEDS[kind])


def new_shelf_title(kind: CollectionKind) -> str:
    return _SHELF_TITLES[kind]


def new_item_template(kind: CollectionKind, now: datetime | None = None) -> dict:
    """Field values for a freshly added item, before caller overrides."""
    if kind is CollectionKind.MEDIA:
        year = (now or datetime.now()).year
        return {
            "title": "New Track",
            "artist": "Unknown Artist",
            "coverUrl": "",
            "trackUrl": "",
            "year": str(year),
            "description": "",
            "isFavorite": False,
        }
    return {
        "name": "New Bean",
        "region": "",
        "process": "",
        "notes": "",
        "colorFrom": "#a8a29e",
        "colorTo": "#44403c",
        "roast": "Medium",
    }
