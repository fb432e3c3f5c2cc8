import json
import pytest
from json_file_db import (
    Collection,
    CorruptStorageError,
    Database,
    NoInsertYetError,
    NotBoundError,
    ValidationError,
)
from json_file_db.storage import FileStorage

def test_insert_assigns_id(tmp_path):
    coll = Database("db", tmp_path).collection("c")
    rec = coll.insert({"name": "a"})
    assert isinstance(rec["id"], str) and len(rec["id"]) == 32
    assert coll.last_insert_id() == rec["id"]

def test_insert_keeps_supplied_id(tmp_path):
    coll = Database("db", tmp_path).collection("c")
    rec = coll.insert({"id": "x", "name": "a"})
    assert rec == {"id": "x", "name": "a"}
    assert coll.last_insert_id() == "x"

def test_insert_none_id_is_generated(tmp_path):
    coll = Database("db", tmp_path).collection("c")
    rec = coll.insert({"id": None})
    assert rec["id"]

def test_duplicate_supplied_ids_are_not_rejected(tmp_path):
    coll = Database("db", tmp_path).collection("c")
    coll.insert({"id": "dup", "n": 1})
    coll.insert({"id": "dup", "n": 2})
    assert [r["n"] for r in coll.find({"id": "dup"})] == [1, 2]

def test_insert_does_not_mutate_input(tmp_path):
    coll = Database("db", tmp_path).collection("c")
    src = {"name": "a", "nested": {"k": 1}}
    rec = coll.insert(src)
    assert "id" not in src
    rec["nested"]["k"] = 99
    assert coll.all()[0]["nested"] == {"k": 1}

def test_last_insert_id_before_insert(tmp_path):
    coll = Database("db", tmp_path).collection("c")
    with pytest.raises(NoInsertYetError):
        coll.last_insert_id()

def test_last_insert_id_is_per_handle(tmp_path):
    Database("db1", tmp_path).collection("c").insert({"id": "x"})
    other = Database("db2", tmp_path).collection("c")
    with pytest.raises(NoInsertYetError):
        other.last_insert_id()
    assert other.get("x") == {"id": "x"}

def test_update_merges_and_returns_full_set(tmp_path):
    coll = Database("db", tmp_path).collection("c")
    coll.insert({"id": 1, "name": "John", "age": 28})
    coll.insert({"id": 2, "name": "Jane", "age": 40})

    result = coll.update({"name": "John"}, {"age": 29, "city": "Wien"})
    assert result == [
        {"id": 1, "name": "John", "age": 29, "city": "Wien"},
        {"id": 2, "name": "Jane", "age": 40},
    ]
    assert coll.find({"name": "John"}) == [{"id": 1, "name": "John", "age": 29, "city": "Wien"}]
    on_disk = json.loads((tmp_path / "c.json").read_text(encoding="utf-8"))
    assert on_disk == result

def test_update_no_match_leaves_records(tmp_path):
    coll = Database("db", tmp_path).collection("c")
    coll.insert({"id": 1, "n": 1})
    assert coll.update({"n": 2}, {"n": 3}) == [{"id": 1, "n": 1}]

def test_delete_returns_removed(tmp_path):
    coll = Database("db", tmp_path).collection("c")
    coll.insert({"id": 1, "age": 29})
    coll.insert({"id": 2, "age": 30})
    coll.insert({"id": 3, "age": 29})

    removed = coll.delete({"age": 29})
    assert removed == [{"id": 1, "age": 29}, {"id": 3, "age": 29}]
    assert coll.all() == [{"id": 2, "age": 30}]
    assert coll.delete({"age": 29}) == []

def test_delete_empty_query_clears(tmp_path):
    coll = Database("db", tmp_path).collection("c")
    coll.insert({"id": 1})
    coll.insert({"id": 2})
    assert len(coll.delete({})) == 2
    assert (tmp_path / "c.json").read_bytes() == b"[]"

def test_bad_arguments(tmp_path):
    coll = Database("db", tmp_path).collection("c")
    with pytest.raises(ValidationError):
        coll.insert(["not", "a", "dict"])
    with pytest.raises(ValidationError):
        coll.update({}, "age=1")
    with pytest.raises(ValidationError):
        coll.insert({"when": object()})
    assert coll.all() == []
    with pytest.raises(NoInsertYetError):
        coll.last_insert_id()

def test_unbound_handle(tmp_path):
    coll = Collection("c", FileStorage(tmp_path / "c.json"))
    assert not coll.bound
    with pytest.raises(NotBoundError):
        coll.all()
    with pytest.raises(NotBoundError):
        coll.insert({"id": "x"})
    assert not (tmp_path / "c.json").exists()

    coll.bind()
    assert coll.bound
    assert (tmp_path / "c.json").read_bytes() == b"[]"
    coll.insert({"id": "x"})
    assert coll.all() == [{"id": "x"}]

def test_corrupt_file(tmp_path):
    (tmp_path / "bad.json").write_text('{"not": "an array"}', encoding="utf-8")
    (tmp_path / "broken.json").write_text('[{"id": 1}, ', encoding="utf-8")
    db = Database("db", tmp_path)
    bad = db.collection("bad")
    with pytest.raises(CorruptStorageError):
        bad.all()
    with pytest.raises(CorruptStorageError):
        bad.insert({"id": "x"})
    # Prior contents untouched
    assert (tmp_path / "bad.json").read_text(encoding="utf-8") == '{"not": "an array"}'
    with pytest.raises(CorruptStorageError):
        db.collection("broken").find({})

def test_unicode_roundtrip(tmp_path):
    coll = Database("db", tmp_path).collection("c")
    coll.insert({"id": "u", "title": "日本語タイトル", "emoji": "🎨"})
    raw = (tmp_path / "c.json").read_bytes()
    assert "日本語タイトル".encode("utf-8") in raw
    assert coll.get("u")["emoji"] == "🎨"

def test_insert_rejects_nan_before_store(tmp_path):
    coll = Database("db", tmp_path).collection("c")
    coll.insert({"id": "ok", "v": 1.5})
    before = (tmp_path / "c.json").read_bytes()
    with pytest.raises(ValidationError):
        coll.insert({"id": "a", "v": float("nan")})
    with pytest.raises(ValidationError):
        coll.update({"id": "ok"}, {"v": float("inf")})
    assert (tmp_path / "c.json").read_bytes() == before
    # The file stays strict JSON
    json.loads(before, parse_constant=lambda name: pytest.fail(f"non-JSON token {name}"))
    assert coll.last_insert_id() == "ok"

def test_non_string_keys_rejected(tmp_path):
    coll = Database("db", tmp_path).collection("c")
    with pytest.raises(ValidationError):
        coll.insert({"id": "k", 1: "int-key", "1": "str-key"})
    with pytest.raises(ValidationError):
        coll.insert({"id": "k", "nested": {2: "deep"}})
    assert coll.all() == []

    coll.insert({"id": "k", "1": "str-key"})
    with pytest.raises(ValidationError):
        coll.update({"id": "k"}, {1: "int-key"})
    assert coll.all() == [{"id": "k", "1": "str-key"}]
