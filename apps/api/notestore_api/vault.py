from __future__ import annotations

import re
import threading
import uuid
from pathlib import Path
from typing import Iterable

from notestore_api.domain.entities import (
    AccessLevel,
    Note,
    NotePermissions,
    Revision,
    RevisionMeta,
)
from notestore_api.domain.exceptions import AliasError, AlreadyExistsError, NotFoundError
from notestore_api.util import atomic_write_json, atomic_write_text, content_hash, read_json, rfc3339_now


_ALIAS_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,63}$")

RESERVED_ALIASES = frozenset({"health", "me", "new"})


def normalize_alias(alias: str, forbidden: Iterable[str] = ()) -> str:
    cleaned = alias.strip()
    if not cleaned:
        raise AliasError("alias_empty")
    if not _ALIAS_RE.match(cleaned):
        raise AliasError("alias_invalid")
    lowered = cleaned.lower()
    if lowered in RESERVED_ALIASES or lowered in {f.lower() for f in forbidden}:
        raise AliasError("alias_forbidden")
    return cleaned


def _permissions_to_json(permissions: NotePermissions) -> dict:
    return {
        "users": {name: level.value for name, level in permissions.users.items()},
        "groups": {name: level.value for name, level in permissions.groups.items()},
    }


def _permissions_from_json(raw: object) -> NotePermissions:
    if not isinstance(raw, dict):
        return NotePermissions()

    def _levels(section: object) -> dict[str, AccessLevel]:
        if not isinstance(section, dict):
            return {}
        out: dict[str, AccessLevel] = {}
        for name, value in section.items():
            try:
                out[str(name)] = AccessLevel(value)
            except ValueError:
                continue
        return out

    return NotePermissions(users=_levels(raw.get("users")), groups=_levels(raw.get("groups")))


class NoteIndex:
    """Note records keyed by id, persisted as one JSON document."""

    def __init__(self, notes_dir: Path) -> None:
        self.meta_dir = notes_dir / ".notestore"
        self.path = self.meta_dir / "notes.json"

    def load(self) -> dict[str, dict]:
        try:
            data = read_json(self.path, {})
        except ValueError as exc:
            raise ValueError("note_index_corrupt") from exc
        if not isinstance(data, dict):
            raise ValueError("note_index_corrupt")
        return {str(k): v for k, v in data.items() if isinstance(v, dict)}

    def write(self, records: dict[str, dict]) -> None:
        atomic_write_json(self.path, records)

    def find_alias(self, records: dict[str, dict], alias: str) -> str | None:
        for note_id, record in records.items():
            if record.get("alias") == alias:
                return note_id
        return None


class RevisionLog:
    def __init__(self, notes_dir: Path) -> None:
        self.dir = notes_dir / ".notestore" / "revisions"

    def _path(self, note_id: str) -> Path:
        return self.dir / f"{note_id}.json"

    def load(self, note_id: str) -> list[dict]:
        try:
            data = read_json(self._path(note_id), [])
        except ValueError as exc:
            raise ValueError("revision_log_corrupt") from exc
        if not isinstance(data, list):
            raise ValueError("revision_log_corrupt")
        return [r for r in data if isinstance(r, dict) and isinstance(r.get("id"), int)]

    def append(self, note_id: str, content: str, author: str | None, created_at: str) -> None:
        revisions = self.load(note_id)
        next_id = max((r["id"] for r in revisions), default=0) + 1
        revisions.append({"id": next_id, "content": content, "author": author, "created_at": created_at})
        atomic_write_json(self._path(note_id), revisions)

    def delete(self, note_id: str) -> None:
        self._path(note_id).unlink(missing_ok=True)


class FileNoteStore:
    def __init__(self, notes_dir: Path) -> None:
        self.notes_dir = notes_dir
        self.content_dir = notes_dir / "notes"
        self.index = NoteIndex(notes_dir)
        self.revisions = RevisionLog(notes_dir)
        self._lock = threading.Lock()

    def _content_path(self, note_id: str) -> Path:
        return self.content_dir / f"{note_id}.md"

    def _build_note(self, note_id: str, record: dict) -> Note | None:
        path = self._content_path(note_id)
        if not path.exists():
            return None
        content = path.read_bytes().decode("utf-8")
        return Note(
            id=note_id,
            alias=record.get("alias"),
            owner=record.get("owner"),
            permissions=_permissions_from_json(record.get("permissions")),
            content=content,
            created_at=record.get("created_at") or "",
            updated_at=record.get("updated_at") or "",
            update_user=record.get("update_user"),
            content_hash=content_hash(content),
        )

    def _require_note(self, note_id: str, record: dict) -> Note:
        note = self._build_note(note_id, record)
        if note is None:
            raise NotFoundError()
        return note

    def get_by_id(self, note_id: str) -> Note | None:
        record = self.index.load().get(note_id)
        if record is None:
            return None
        return self._build_note(note_id, record)

    def get_by_alias(self, alias: str) -> Note | None:
        records = self.index.load()
        note_id = self.index.find_alias(records, alias)
        if note_id is None:
            return None
        return self._build_note(note_id, records[note_id])

    def create(
        self,
        content: str,
        alias: str | None,
        owner: str | None,
        permissions: NotePermissions | None = None,
    ) -> Note:
        with self._lock:
            records = self.index.load()
            if alias is not None and self.index.find_alias(records, alias) is not None:
                raise AlreadyExistsError(alias)
            note_id = str(uuid.uuid4())
            now = rfc3339_now()
            records[note_id] = {
                "alias": alias,
                "owner": owner,
                "created_at": now,
                "updated_at": now,
                "update_user": owner,
                "permissions": _permissions_to_json(permissions or NotePermissions()),
            }
            atomic_write_text(self._content_path(note_id), content)
            self.revisions.append(note_id, content, owner, now)
            self.index.write(records)
        return self._require_note(note_id, records[note_id])

    def write_content(self, note_id: str, content: str, author: str | None) -> Note:
        with self._lock:
            records = self.index.load()
            record = records.get(note_id)
            if record is None:
                raise NotFoundError()
            previous = self._build_note(note_id, record)
            if previous is not None and previous.content_hash == content_hash(content):
                return previous
            now = rfc3339_now()
            atomic_write_text(self._content_path(note_id), content)
            self.revisions.append(note_id, content, author, now)
            record["updated_at"] = now
            record["update_user"] = author
            self.index.write(records)
        return self._require_note(note_id, record)

    def delete(self, note_id: str) -> None:
        with self._lock:
            records = self.index.load()
            if records.pop(note_id, None) is None:
                raise NotFoundError()
            self._content_path(note_id).unlink(missing_ok=True)
            self.revisions.delete(note_id)
            self.index.write(records)

    def set_permissions(self, note_id: str, permissions: NotePermissions) -> Note:
        with self._lock:
            records = self.index.load()
            record = records.get(note_id)
            if record is None:
                raise NotFoundError()
            record["permissions"] = _permissions_to_json(permissions)
            self.index.write(records)
        return self._require_note(note_id, record)

    def list_revisions(self, note_id: str) -> list[RevisionMeta]:
        metas = [
            RevisionMeta(
                id=r["id"],
                length=len(r.get("content") or ""),
                created_at=r.get("created_at") or "",
                author=r.get("author"),
            )
            for r in self.revisions.load(note_id)
        ]
        metas.sort(key=lambda m: m.id, reverse=True)
        return metas

    def get_revision(self, note_id: str, revision_id: int) -> Revision | None:
        for r in self.revisions.load(note_id):
            if r["id"] == revision_id:
                content = r.get("content") or ""
                return Revision(
                    id=r["id"],
                    content=content,
                    length=len(content),
                    created_at=r.get("created_at") or "",
                    author=r.get("author"),
                )
        return None
