from __future__ import annotations

import logging
from typing import Iterable

from notestore_api.domain.entities import EVERYONE, AccessLevel, Identity, Note, NotePermissions, Revision, RevisionMeta
from notestore_api.domain.exceptions import NotFoundError, NoteTooLongError
from notestore_api.domain.ports import NoteRepository
from notestore_api.domain.schemas import (
    GroupPermissionOut,
    NoteMetadataOut,
    NoteOut,
    NotePermissionsOut,
    NotePermissionsUpdateIn,
    UserPermissionOut,
)
from notestore_api.parsing import extract_markdown_meta
from notestore_api.vault import normalize_alias


logger = logging.getLogger("notestore.notes")


class NoteService:
    """Note operations on notes the access gate has already resolved."""

    def __init__(
        self,
        notes: NoteRepository,
        *,
        max_note_length: int = 100000,
        forbidden_aliases: Iterable[str] = (),
    ) -> None:
        self.notes = notes
        self.max_note_length = max_note_length
        self.forbidden_aliases = tuple(forbidden_aliases)

    def _check_length(self, content: str) -> None:
        if len(content) > self.max_note_length:
            raise NoteTooLongError("note_too_long")

    def create(self, identity: Identity, content: str, alias: str | None = None) -> Note:
        content = content.strip()
        self._check_length(content)
        if alias is not None:
            alias = normalize_alias(alias, self.forbidden_aliases)
        permissions = None
        if identity.is_guest:
            # Guest notes have no owner; the everyone group keeps them reachable.
            permissions = NotePermissions(groups={EVERYONE: AccessLevel.WRITE})
        note = self.notes.create(content, alias, identity.username, permissions)
        logger.info("note_create", extra={"id": note.id, "alias": note.alias, "user": identity.username})
        return note

    def update(self, identity: Identity, note: Note, content: str) -> Note:
        content = content.strip()
        self._check_length(content)
        updated = self.notes.write_content(note.id, content, identity.username)
        logger.info("note_update", extra={"id": note.id, "user": identity.username})
        return updated

    def delete(self, note: Note) -> None:
        self.notes.delete(note.id)
        logger.info("note_delete", extra={"id": note.id, "alias": note.alias})

    def update_permissions(self, note: Note, update: NotePermissionsUpdateIn) -> Note:
        users = {
            entry.username: AccessLevel.from_can_edit(entry.can_edit)
            for entry in update.shared_to_users
            if entry.username != note.owner
        }
        groups = {entry.groupname: AccessLevel.from_can_edit(entry.can_edit) for entry in update.shared_to_groups}
        updated = self.notes.set_permissions(note.id, NotePermissions(users=users, groups=groups))
        logger.info("note_permissions_update", extra={"id": note.id, "users": len(users), "groups": len(groups)})
        return updated

    def list_revisions(self, note: Note) -> list[RevisionMeta]:
        return self.notes.list_revisions(note.id)

    def get_revision(self, note: Note, revision_id: int) -> Revision:
        revision = self.notes.get_revision(note.id, revision_id)
        if revision is None:
            raise NotFoundError("revision_not_found")
        return revision

    def permissions(self, note: Note) -> NotePermissionsOut:
        return NotePermissionsOut(
            owner=note.owner,
            shared_to_users=[
                UserPermissionOut(username=name, can_edit=level is AccessLevel.WRITE)
                for name, level in sorted(note.permissions.users.items())
            ],
            shared_to_groups=[
                GroupPermissionOut(groupname=name, can_edit=level is AccessLevel.WRITE)
                for name, level in sorted(note.permissions.groups.items())
            ],
        )

    def metadata(self, note: Note) -> NoteMetadataOut:
        meta = extract_markdown_meta(note.content)
        edited_by: list[str] = []
        for rev in sorted(self.notes.list_revisions(note.id), key=lambda r: r.id):
            if rev.author and rev.author not in edited_by:
                edited_by.append(rev.author)
        return NoteMetadataOut(
            id=note.id,
            alias=note.alias,
            title=meta.title or note.alias or note.id,
            description=meta.description or "",
            tags=meta.tags,
            created_at=note.created_at,
            updated_at=note.updated_at,
            update_user=note.update_user,
            edited_by=edited_by,
            permissions=self.permissions(note),
            frontmatter_error=meta.frontmatter_error,
        )

    def to_dto(self, note: Note) -> NoteOut:
        return NoteOut(content=note.content, metadata=self.metadata(note))
