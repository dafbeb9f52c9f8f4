import json

import pytest

from notestore_api.domain.entities import EVERYONE, AccessLevel, NotePermissions
from notestore_api.domain.exceptions import AliasError, AlreadyExistsError, NotFoundError
from notestore_api.vault import FileNoteStore, normalize_alias


def test_created_at_persists_across_update_and_permissions(tmp_path) -> None:
    store = FileNoteStore(tmp_path)

    n1 = store.create("hello\n", "a", "alice")
    assert n1.created_at
    assert n1.updated_at

    n2 = store.write_content(n1.id, "hello again\n", "bob")
    assert n2.id == n1.id
    assert n2.created_at == n1.created_at
    assert n2.update_user == "bob"

    n3 = store.set_permissions(n1.id, NotePermissions(groups={EVERYONE: AccessLevel.READ}))
    assert n3.permissions.groups == {EVERYONE: AccessLevel.READ}
    assert n3.created_at == n1.created_at

    records = json.loads((tmp_path / ".notestore" / "notes.json").read_text(encoding="utf-8"))
    assert records[n1.id]["alias"] == "a"
    assert records[n1.id]["permissions"]["groups"] == {EVERYONE: "read"}
    assert (tmp_path / "notes" / f"{n1.id}.md").read_text(encoding="utf-8") == "hello again\n"


def test_delete_removes_content_record_and_revisions(tmp_path) -> None:
    store = FileNoteStore(tmp_path)
    note = store.create("bye", "gone", "alice")

    store.delete(note.id)

    assert store.get_by_id(note.id) is None
    assert store.get_by_alias("gone") is None
    assert store.list_revisions(note.id) == []
    assert not (tmp_path / "notes" / f"{note.id}.md").exists()
    with pytest.raises(NotFoundError):
        store.delete(note.id)


def test_alias_must_be_unique(tmp_path) -> None:
    store = FileNoteStore(tmp_path)
    store.create("one", "dup", "alice")
    with pytest.raises(AlreadyExistsError):
        store.create("two", "dup", "bob")


def test_unchanged_content_records_no_revision(tmp_path) -> None:
    store = FileNoteStore(tmp_path)
    note = store.create("same", None, "alice")
    store.write_content(note.id, "same", "bob")
    assert [r.id for r in store.list_revisions(note.id)] == [1]
    assert store.get_by_id(note.id).update_user == "alice"


def test_corrupt_index_is_not_overwritten(tmp_path) -> None:
    store = FileNoteStore(tmp_path)
    store.create("keep me", "keep", "alice")
    index = tmp_path / ".notestore" / "notes.json"
    truncated = index.read_text(encoding="utf-8")[:20]
    index.write_text(truncated, encoding="utf-8")

    with pytest.raises(ValueError, match="note_index_corrupt"):
        store.create("other", "b", "bob")
    with pytest.raises(ValueError, match="note_index_corrupt"):
        store.get_by_alias("keep")
    assert index.read_text(encoding="utf-8") == truncated


def test_non_object_index_is_rejected(tmp_path) -> None:
    meta = tmp_path / ".notestore"
    meta.mkdir()
    (meta / "notes.json").write_text("[]", encoding="utf-8")
    with pytest.raises(ValueError, match="note_index_corrupt"):
        FileNoteStore(tmp_path).get_by_id("anything")


def test_content_line_endings_are_kept(tmp_path) -> None:
    store = FileNoteStore(tmp_path)
    note = store.create("a\r\nb\rc", "crlf", "alice")

    assert store.get_by_id(note.id).content == "a\r\nb\rc"
    assert (tmp_path / "notes" / f"{note.id}.md").read_bytes() == b"a\r\nb\rc"
    assert store.get_revision(note.id, 1).content == "a\r\nb\rc"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("my-note", "my-note"),
        (" Notes_2025.v1 ", "Notes_2025.v1"),
    ],
)
def test_normalize_alias(raw: str, expected: str) -> None:
    assert normalize_alias(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "-leading", "has space", "a/b", "x" * 65, "NEW", "health"])
def test_normalize_alias_rejects_invalid(raw: str) -> None:
    with pytest.raises(AliasError):
        normalize_alias(raw)


def test_normalize_alias_honours_configured_forbidden_list() -> None:
    with pytest.raises(AliasError):
        normalize_alias("Drafts", forbidden=("drafts",))
