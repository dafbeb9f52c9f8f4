from __future__ import annotations

from notestore_api.domain.entities import Note
from notestore_api.domain.exceptions import NotFoundError
from notestore_api.domain.ports import NoteRepository


class NoteResolver:
    """Looks a note up by id, then by alias. Ids win when both match."""

    def __init__(self, notes: NoteRepository) -> None:
        self.notes = notes

    def resolve(self, identifier: str) -> Note:
        if not identifier:
            raise NotFoundError()
        note = self.notes.get_by_id(identifier)
        if note is None:
            note = self.notes.get_by_alias(identifier)
        if note is None:
            raise NotFoundError()
        return note
