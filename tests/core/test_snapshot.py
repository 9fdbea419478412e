"""Snapshot - tests for document building and parsing."""

import json
from datetime import datetime, timezone

import pytest

from mindpalace.core.domain_types import CollectionKind, SNAPSHOT_VERSION
from mindpalace.core.errors import RecordValidationError, SnapshotParseError
from mindpalace.core.seed_data import default_shelves
from mindpalace.core.snapshot import (
    build_snapshot, dump_shelves, load_shelves, parse_snapshot, snapshot_filename,
)
from tests.helpers import layout, media_record

MEDIA = CollectionKind.MEDIA
INGREDIENT = CollectionKind.INGREDIENT
NOW = datetime(2024, 3, 9, 14, 30, 5, 123456, tzinfo=timezone.utc)


def _seed_collections():
    return {kind: default_shelves(kind) for kind in CollectionKind}


# -- build_snapshot ------------------------------------------------------------

def test_build_snapshot_keys_and_version():
    doc = build_snapshot(_seed_collections(), NOW)
    assert set(doc) == {"cafe", "audio", "version", "timestamp"}
    assert doc["version"] == SNAPSHOT_VERSION == 1
    assert doc["timestamp"] == "2024-03-09T14:30:05.123Z"


def test_build_snapshot_uses_wire_names():
    doc = build_snapshot(_seed_collections(), NOW)
    album = doc["audio"][0]["items"][0]
    bean = doc["cafe"][0]["items"][0]
    assert album["coverUrl"].startswith("https://")
    assert album["isFavorite"] is True
    assert bean["colorFrom"] == "#f472b6"
    assert bean["roast"] == "Light"
    json.dumps(doc)


def test_absent_optional_fields_stay_absent():
    doc = build_snapshot(_seed_collections(), NOW)
    assert "isFavorite" not in doc["audio"][0]["items"][1]


def test_snapshot_filename():
    assert snapshot_filename(NOW) == "mind_palace_backup_2024-03-09.json"
    assert snapshot_filename(NOW, prefix="shelves") == "shelves_2024-03-09.json"


# -- parse_snapshot ------------------------------------------------------------

def test_dump_then_parse_reproduces_collections():
    doc = build_snapshot(_seed_collections(), NOW)
    parsed = parse_snapshot(json.dumps(doc))
    for kind in CollectionKind:
        assert dump_shelves(parsed[kind]) == doc[kind.value]


@pytest.mark.parametrize("raw", [
    "{not json", "", "[1, 2]", '"audio"', "null", "[" * 200_000,
])
def test_unparseable_or_non_object_raises(raw):
    with pytest.raises(SnapshotParseError) as exc:
        parse_snapshot(raw)
    assert exc.value.code == "IMPORT_PARSE_FAILED"


def test_partial_document_only_returns_present_keys():
    parsed = parse_snapshot(json.dumps({"audio": [media_record(4, 40)]}))
    assert set(parsed) == {MEDIA}
    assert layout(parsed[MEDIA]) == {4: [40]}


def test_null_key_counts_as_absent():
    parsed = parse_snapshot(json.dumps({"cafe": None, "audio": []}))
    assert parsed == {MEDIA: ()}


def test_unrecognized_keys_ignored():
    assert parse_snapshot(json.dumps({"books": [], "version": 7})) == {}


def test_invalid_record_fails_whole_document():
    doc = {
        "audio": [media_record(4, 40)],
        "cafe": [{"id": 1, "title": "x", "items": [{"id": 2, "name": "y", "roast": "Burnt"}]}],
    }
    with pytest.raises(SnapshotParseError):
        parse_snapshot(json.dumps(doc))


def test_collection_must_be_a_list():
    with pytest.raises(SnapshotParseError):
        parse_snapshot(json.dumps({"audio": {"id": 1}}))


@pytest.mark.parametrize("record", [
    {"id": 2**70, "title": "x", "items": []},
    {"id": 1, "title": "x", "items": [{"id": -(2**63) - 1, "title": "y"}]},
])
def test_ids_outside_int64_rejected(record):
    with pytest.raises(SnapshotParseError):
        parse_snapshot(json.dumps({"audio": [record]}))


def test_int64_bounds_accepted():
    record = {"id": 2**63 - 1, "title": "x", "items": [{"id": -(2**63), "title": "y"}]}
    parsed = parse_snapshot(json.dumps({"audio": [record]}))
    assert layout(parsed[MEDIA]) == {2**63 - 1: [-(2**63)]}


def test_numeric_year_is_coerced_to_string():
    record = media_record(1, 10)
    record["items"][0]["year"] = 1999
    parsed = parse_snapshot(json.dumps({"audio": [record]}))
    assert parsed[MEDIA][0].items[0].year == "1999"


# -- load_shelves --------------------------------------------------------------

def test_duplicate_shelf_id_rejected():
    with pytest.raises(RecordValidationError, match="shelf id 1"):
        load_shelves(MEDIA, [media_record(1, 10), media_record(1, 11)])


def test_duplicate_item_id_across_shelves_rejected():
    with pytest.raises(RecordValidationError, match="item id 10"):
        load_shelves(MEDIA, [media_record(1, 10), media_record(2, 10)])


def test_media_records_do_not_validate_as_ingredients():
    with pytest.raises(RecordValidationError):
        load_shelves(INGREDIENT, [media_record(1, 10)])
