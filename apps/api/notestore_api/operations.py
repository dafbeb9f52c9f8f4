from __future__ import annotations

from typing import Iterable, Mapping

from notestore_api.config import Settings
from notestore_api.domain.exceptions import MisconfiguredOperationError
from notestore_api.domain.permissions import PermissionLevel


NOTE_CREATE = "note.create"
NOTE_CREATE_NAMED = "note.create_named"
NOTE_READ = "note.read"
NOTE_CONTENT = "note.content"
NOTE_METADATA = "note.metadata"
NOTE_UPDATE = "note.update"
NOTE_DELETE = "note.delete"
NOTE_PERMISSIONS_UPDATE = "note.permissions.update"
NOTE_REVISIONS_LIST = "note.revisions.list"
NOTE_REVISIONS_GET = "note.revisions.get"


def build_operation_permissions(settings: Settings) -> dict[str, PermissionLevel]:
    return {
        NOTE_CREATE: PermissionLevel.CREATE,
        NOTE_CREATE_NAMED: PermissionLevel.CREATE,
        NOTE_READ: PermissionLevel.READ,
        NOTE_CONTENT: PermissionLevel.READ,
        NOTE_METADATA: PermissionLevel.READ,
        NOTE_UPDATE: PermissionLevel.WRITE,
        NOTE_DELETE: PermissionLevel(settings.delete_note_permission),
        NOTE_PERMISSIONS_UPDATE: PermissionLevel.OWNER,
        NOTE_REVISIONS_LIST: PermissionLevel.READ,
        NOTE_REVISIONS_GET: PermissionLevel.READ,
    }


def validate_operation_permissions(
    declared: Iterable[str], permissions: Mapping[str, PermissionLevel]
) -> None:
    missing = sorted(op for op in set(declared) if op not in permissions)
    if missing:
        raise MisconfiguredOperationError("operations without permission: " + ", ".join(missing))
