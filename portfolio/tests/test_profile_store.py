"""Tests for JsonProfileStore - CRUD over users.json and the whole-document rewrite race"""
import json
import threading
import time

import pytest

from portfolio.app.core.exceptions import NotFoundError, StorageError, ValidationError
from portfolio.app.schemas.profile import ProfileFields, Project, Social
from portfolio.app.services.profile_store import JsonProfileStore
from portfolio.tests.conftest import PNG_BYTES


def test_list_all_first_run_is_empty(json_store, settings):
    assert not settings.users_file_path.exists()
    assert json_store.list_all() == []


def test_list_all_empty_file_is_empty(json_store, settings):
    settings.users_file_path.write_text("")
    assert json_store.list_all() == []


def test_list_all_corrupt_document_raises_storage_error(json_store, settings):
    settings.users_file_path.write_text("{not json")
    with pytest.raises(StorageError):
        json_store.list_all()


def test_list_all_non_array_document_raises_storage_error(json_store, settings):
    settings.users_file_path.write_text('{"id": "x"}')
    with pytest.raises(StorageError):
        json_store.list_all()


def test_create_with_only_full_name(json_store):
    first = json_store.create(ProfileFields(fullName="Ada Lovelace"))
    second = json_store.create(ProfileFields(fullName="Grace Hopper"))
    assert first.skills == [] and first.projects == [] and first.socials == []
    assert first.profession is None
    assert first.profilePicture is None
    assert first.id != second.id
    assert first.createdAt == first.updatedAt
    assert first.createdAt.endswith("Z")


def test_create_requires_full_name(json_store, settings):
    with pytest.raises(ValidationError):
        json_store.create(ProfileFields(fullName="   "))
    with pytest.raises(ValidationError):
        json_store.create(ProfileFields(profession="Engineer"))
    assert not settings.users_file_path.exists()


def test_create_persists_whole_document_in_order(json_store, settings):
    ids = [json_store.create(ProfileFields(fullName=f"User {i}")).id for i in range(3)]
    document = json.loads(settings.users_file_path.read_text())
    assert [r["id"] for r in document] == ids
    assert [r.id for r in json_store.list_all()] == ids


def test_create_then_get_round_trip(json_store):
    created = json_store.create(
        ProfileFields(
            fullName="Ada Lovelace",
            profession="Analyst",
            skills=["math", "poetry"],
            projects=[Project(name="Engine", link="https://example.com/engine")],
            socials=[Social(platform="github", link="https://github.com/ada")],
        )
    )
    assert json_store.get_by_id(created.id) == created


def test_get_by_id_absent(json_store):
    json_store.create(ProfileFields(fullName="Ada"))
    assert json_store.get_by_id("missing") is None


def test_update_merges_by_presence(json_store):
    created = json_store.create(ProfileFields(fullName="Ada", profession="Analyst", skills=["math"]))
    time.sleep(0.002)
    updated = json_store.update(created.id, ProfileFields(skills=["x"]))
    assert updated.skills == ["x"]
    assert updated.profession == "Analyst"
    assert updated.fullName == "Ada"
    assert updated.createdAt == created.createdAt
    assert updated.updatedAt > created.updatedAt
    assert json_store.get_by_id(created.id) == updated


def test_update_present_key_fully_replaces_list(json_store):
    created = json_store.create(
        ProfileFields(fullName="Ada", projects=[Project(name="a", link="1"), Project(name="b", link="2")])
    )
    updated = json_store.update(created.id, ProfileFields(projects=[]))
    assert updated.projects == []


def test_update_explicit_null_profession_clears_it(json_store):
    created = json_store.create(ProfileFields(fullName="Ada", profession="Analyst"))
    assert json_store.update(created.id, ProfileFields(profession=None)).profession is None


def test_update_rejects_empty_full_name(json_store):
    created = json_store.create(ProfileFields(fullName="Ada"))
    with pytest.raises(ValidationError):
        json_store.update(created.id, ProfileFields(fullName=""))
    assert json_store.get_by_id(created.id).fullName == "Ada"


def test_update_nonexistent_leaves_document_unchanged(json_store, settings):
    json_store.create(ProfileFields(fullName="Ada"))
    before = settings.users_file_path.read_bytes()
    with pytest.raises(NotFoundError):
        json_store.update("missing", ProfileFields(profession="Engineer"))
    assert settings.users_file_path.read_bytes() == before


def test_delete_removes_record_and_picture(json_store, pictures):
    filename = pictures.put(PNG_BYTES, "image/png", len(PNG_BYTES), "me.png")
    created = json_store.create(ProfileFields(fullName="Ada", profilePicture=filename))
    keep = json_store.create(ProfileFields(fullName="Grace"))
    json_store.delete(created.id)
    assert json_store.get_by_id(created.id) is None
    assert pictures.get(filename) is None
    assert [r.id for r in json_store.list_all()] == [keep.id]


def test_delete_with_already_missing_picture(json_store):
    created = json_store.create(ProfileFields(fullName="Ada", profilePicture="gone.png"))
    json_store.delete(created.id)
    assert json_store.get_by_id(created.id) is None


def test_delete_nonexistent_raises_not_found(json_store, settings):
    json_store.create(ProfileFields(fullName="Ada"))
    before = settings.users_file_path.read_bytes()
    with pytest.raises(NotFoundError):
        json_store.delete("missing")
    assert settings.users_file_path.read_bytes() == before


def test_document_written_with_camel_case_keys(json_store, settings):
    json_store.create(ProfileFields(fullName="Ada", socials=[Social(platform="x", link="y")]))
    record = json.loads(settings.users_file_path.read_text())[0]
    assert set(record) == {
        "id", "fullName", "profession", "skills", "projects", "socials",
        "profilePicture", "createdAt", "updatedAt",
    }
    assert record["socials"] == [{"platform": "x", "link": "y"}]


def test_no_temp_files_left_behind(json_store, settings):
    json_store.create(ProfileFields(fullName="Ada"))
    leftovers = [p.name for p in settings.users_file_path.parent.iterdir() if p.suffix == ".tmp"]
    assert leftovers == []


def _run_concurrently(*targets):
    threads = [threading.Thread(name=name, target=fn) for name, fn in targets]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)


def test_concurrent_updates_last_writer_wins(json_store, monkeypatch):
    """
    Two updates read the same base document; the later rewrite carries the
    stale value of the field the earlier update changed, so that change is lost.
    """
    base = json_store.create(ProfileFields(fullName="Ada", profession="Analyst", skills=["math"]))
    both_loaded = threading.Barrier(2, timeout=5)
    first_saved = threading.Event()
    load, save = json_store._load, json_store._save

    def racing_load():
        records = load()
        if threading.current_thread().name.startswith("writer-"):
            both_loaded.wait()
        return records

    def ordered_save(records):
        name = threading.current_thread().name
        if name == "writer-b":
            first_saved.wait(timeout=5)
        save(records)
        if name == "writer-a":
            first_saved.set()

    monkeypatch.setattr(json_store, "_load", racing_load)
    monkeypatch.setattr(json_store, "_save", ordered_save)

    _run_concurrently(
        ("writer-a", lambda: json_store.update(base.id, ProfileFields(profession="Engineer"))),
        ("writer-b", lambda: json_store.update(base.id, ProfileFields(skills=["rust"]))),
    )

    stored = json_store.get_by_id(base.id)
    assert stored.skills == ["rust"]
    assert stored.profession == "Analyst"


def test_concurrent_creates_can_drop_a_record(json_store, monkeypatch):
    both_loaded = threading.Barrier(2, timeout=5)
    load = json_store._load

    def racing_load():
        records = load()
        if threading.current_thread().name.startswith("writer-"):
            both_loaded.wait()
        return records

    monkeypatch.setattr(json_store, "_load", racing_load)
    _run_concurrently(
        ("writer-a", lambda: json_store.create(ProfileFields(fullName="Ada"))),
        ("writer-b", lambda: json_store.create(ProfileFields(fullName="Grace"))),
    )
    assert len(json_store.list_all()) == 1


def test_serialize_writes_keeps_both_concurrent_updates(settings, pictures, monkeypatch):
    store = JsonProfileStore(settings.users_file_path, pictures, serialize_writes=True)
    base = store.create(ProfileFields(fullName="Ada", profession="Analyst", skills=["math"]))
    load = store._load

    def slow_load():
        records = load()
        time.sleep(0.05)
        return records

    monkeypatch.setattr(store, "_load", slow_load)
    _run_concurrently(
        ("writer-a", lambda: store.update(base.id, ProfileFields(profession="Engineer"))),
        ("writer-b", lambda: store.update(base.id, ProfileFields(skills=["rust"]))),
    )
    stored = store.get_by_id(base.id)
    assert stored.profession == "Engineer"
    assert stored.skills == ["rust"]


def test_serialize_writes_keeps_every_concurrent_create(settings, pictures):
    store = JsonProfileStore(settings.users_file_path, pictures, serialize_writes=True)
    _run_concurrently(
        *[(f"writer-{i}", lambda i=i: store.create(ProfileFields(fullName=f"User {i}"))) for i in range(10)]
    )
    assert sorted(r.fullName for r in store.list_all()) == sorted(f"User {i}" for i in range(10))
