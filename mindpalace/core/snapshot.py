"""Snapshot - serialization / deserialization of the dual-collection state.

Invariants:
    - build_snapshot produces a JSON-safe dict: one key per collection, version, timestamp
    - parse_snapshot either returns validated shelves for every recognized key present,
      or raises SnapshotParseError - never a partially validated result
    - A recognized key whose value is null counts as absent
    - Unrecognized keys are ignored

Design Decisions:
    - Pure, no IO: services/snapshot_codec.py owns the file and durable collaborators
    - load_shelves is shared with the durable load path so both boundaries validate
      records the same way
"""

import json
from collections.abc import Mapping, Sequence
from datetime import datetime

from pydantic import ValidationError

from mindpalace.core.domain_types import CollectionKind, SNAPSHOT_VERSION
from mindpalace.core.errors import RecordValidationError, SnapshotParseError
from mindpalace.schemas.shelves import shelf_model_for


def dump_shelves(shelves: Sequence) -> list[dict]:
    """JSON-safe records in collection order."""
    return [shelf.to_record() for shelf in shelves]


def load_shelves(kind: CollectionKind, records: object) -> tuple:
    """Validate raw records into shelves for one collection.

    Raises RecordValidationError if records is not a list, a record fails
    validation, or a shelf id or item id repeats within the collection.
    """
    if not isinstance(records, list):
        raise RecordValidationError(
            f"'{kind.value}' must be a list of shelves", field=kind.value,
        )
    model = shelf_model_for(kind)
    try:
        shelves = tuple(model.model_validate(record) for record in records)
    except ValidationError as e:
        raise RecordValidationError(
            f"'{kind.value}' has invalid shelf records: {e.error_count()} error(s)",
            field=kind.value,
        ) from e
    _check_unique_ids(kind, shelves)
    return shelves


def _check_unique_ids(kind: CollectionKind, shelves: Sequence) -> None:
    seen_shelves: set[int] = set()
    seen_items: set[int] = set()
    for shelf in shelves:
        if shelf.id in seen_shelves:
            raise RecordValidationError(
                f"'{kind.value}' repeats shelf id {shelf.id}", field=kind.value,
            )
        seen_shelves.add(shelf.id)
        for item in shelf.items:
            if item.id in seen_items:
                raise RecordValidationError(
                    f"'{kind.value}' repeats item id {item.id}", field=kind.value,
                )
            seen_items.add(item.id)


def _iso_timestamp(now: datetime) -> str:
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_snapshot(collections: Mapping[CollectionKind, Sequence], now: datetime) -> dict:
    """Snapshot document for every collection given. Pure, no IO."""
    doc: dict = {kind.value: dump_shelves(shelves) for kind, shelves in collections.items()}
    doc["version"] = SNAPSHOT_VERSION
    doc["timestamp"] = _iso_timestamp(now)
    return doc


def snapshot_filename(now: datetime, prefix: str = "mind_palace_backup") -> str:
    """Suggested download name: <prefix>_<YYYY-MM-DD>.json."""
    return f"{prefix}_{now.date().isoformat()}.json"


def parse_snapshot(raw_text: str) -> dict[CollectionKind, tuple]:
    """Parse snapshot text into validated shelves, keyed by the collections present.

    An empty result means the document carried no recognized key.
    """
    try:
        doc = json.loads(raw_text)
    except (ValueError, TypeError, RecursionError) as e:
        raise SnapshotParseError(f"not valid JSON ({type(e).__name__})") from e
    if not isinstance(doc, dict):
        raise SnapshotParseError("top-level value must be an object")

    parsed: dict[CollectionKind, tuple] = {}
    for kind in CollectionKind:
        records = doc.get(kind.value)
        if records is None:
            continue
        try:
            parsed[kind] = load_shelves(kind, records)
        except RecordValidationError as e:
            raise SnapshotParseError(e.message) from e
    return parsed
