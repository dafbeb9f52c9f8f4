"""Permission levels and the pure evaluation of a single access check.

The access an identity holds on a note is reduced to one rank
(NONE < READ < WRITE < OWNER). Every note-bound level is a threshold on
that rank, so an identity allowed WRITE is always allowed READ for the
same note, and OWNER is never reachable through a grant.
"""

from __future__ import annotations

import logging
from enum import Enum, IntEnum

from notestore_api.domain.entities import AccessLevel, Identity, Note


logger = logging.getLogger("notestore.access")


class PermissionLevel(str, Enum):
    CREATE = "create"
    READ = "read"
    WRITE = "write"
    OWNER = "owner"


class _Rank(IntEnum):
    NONE = 0
    READ = 1
    WRITE = 2
    OWNER = 3


_GRANT_RANK = {AccessLevel.READ: _Rank.READ, AccessLevel.WRITE: _Rank.WRITE}
_REQUIRED_RANK = {
    PermissionLevel.READ: _Rank.READ,
    PermissionLevel.WRITE: _Rank.WRITE,
    PermissionLevel.OWNER: _Rank.OWNER,
}


def is_owner(identity: Identity, note: Note) -> bool:
    return not identity.is_guest and note.owner is not None and identity.username == note.owner


def access_rank(identity: Identity, note: Note) -> _Rank:
    if is_owner(identity, note):
        return _Rank.OWNER
    rank = _Rank.NONE
    if identity.username is not None:
        user_grant = note.permissions.users.get(identity.username)
        if user_grant is not None:
            rank = max(rank, _GRANT_RANK[user_grant])
    groups = identity.effective_groups()
    for group, level in note.permissions.groups.items():
        if group in groups:
            rank = max(rank, _GRANT_RANK[level])
    return rank


class PermissionEvaluator:
    def __init__(self, *, guest_create_enabled: bool = False) -> None:
        self.guest_create_enabled = guest_create_enabled

    def may_create(self, identity: Identity) -> bool:
        return self.guest_create_enabled or not identity.is_guest

    def evaluate(self, identity: Identity, required: PermissionLevel, note: Note | None) -> bool:
        if required is PermissionLevel.CREATE:
            if note is not None:
                logger.error(
                    "create_check_with_note",
                    extra={"user": identity.username, "id": note.id},
                )
                return False
            return self.may_create(identity)
        if note is None:
            return False
        return access_rank(identity, note) >= _REQUIRED_RANK[required]
