from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


EVERYONE = "_EVERYONE"
LOGGED_IN = "_LOGGED_IN"


class AccessLevel(str, Enum):
    READ = "read"
    WRITE = "write"

    @classmethod
    def from_can_edit(cls, can_edit: bool) -> "AccessLevel":
        return cls.WRITE if can_edit else cls.READ


@dataclass(frozen=True)
class Identity:
    username: str | None
    groups: frozenset[str] = frozenset()

    @classmethod
    def guest(cls) -> "Identity":
        return cls(username=None)

    @property
    def is_guest(self) -> bool:
        return self.username is None

    def effective_groups(self) -> frozenset[str]:
        special = {EVERYONE} if self.is_guest else {EVERYONE, LOGGED_IN}
        return self.groups | special


@dataclass(frozen=True)
class NotePermissions:
    users: dict[str, AccessLevel] = field(default_factory=dict)
    groups: dict[str, AccessLevel] = field(default_factory=dict)


@dataclass(frozen=True)
class Note:
    id: str
    alias: str | None
    owner: str | None
    permissions: NotePermissions
    content: str
    created_at: str
    updated_at: str
    update_user: str | None
    content_hash: str


@dataclass(frozen=True)
class RevisionMeta:
    id: int
    length: int
    created_at: str
    author: str | None


@dataclass(frozen=True)
class Revision:
    id: int
    content: str
    length: int
    created_at: str
    author: str | None
