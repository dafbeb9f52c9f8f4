from __future__ import annotations

from typing import Protocol, runtime_checkable

from notestore_api.domain.entities import Note, NotePermissions, Revision, RevisionMeta


@runtime_checkable
class NoteRepository(Protocol):
    def get_by_id(self, note_id: str) -> Note | None:
        ...

    def get_by_alias(self, alias: str) -> Note | None:
        ...

    def create(
        self,
        content: str,
        alias: str | None,
        owner: str | None,
        permissions: NotePermissions | None = None,
    ) -> Note:
        ...

    def write_content(self, note_id: str, content: str, author: str | None) -> Note:
        ...

    def delete(self, note_id: str) -> None:
        ...

    def set_permissions(self, note_id: str, permissions: NotePermissions) -> Note:
        ...

    def list_revisions(self, note_id: str) -> list[RevisionMeta]:
        ...

    def get_revision(self, note_id: str, revision_id: int) -> Revision | None:
        ...
