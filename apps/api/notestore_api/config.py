from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from notestore_api.util import split_csv


DELETE_PERMISSION_CHOICES = ("write", "owner")


@dataclass(frozen=True)
class Settings:
    notes_dir: Path
    api_auth_mode: str
    api_auth_token: str | None
    api_debug_log: bool
    auth_user_header: str
    auth_groups_header: str
    guest_create_enabled: bool
    delete_note_permission: str
    max_note_length: int
    forbidden_aliases: tuple[str, ...]


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() == "true"


def load_settings() -> Settings:
    notes_dir = Path(os.environ.get("NOTES_DIR", "./notes")).resolve()
    api_auth_mode = os.environ.get("API_AUTH_MODE", "none").lower()
    api_auth_token = os.environ.get("API_AUTH_TOKEN")
    api_debug_log = _env_flag("API_DEBUG_LOG")
    auth_user_header = os.environ.get("AUTH_USER_HEADER", "X-Remote-User")
    auth_groups_header = os.environ.get("AUTH_GROUPS_HEADER", "X-Remote-Groups")
    guest_create_enabled = _env_flag("GUEST_CREATE_ENABLED")
    delete_note_permission = os.environ.get("DELETE_NOTE_PERMISSION", "owner").strip().lower()
    if delete_note_permission not in DELETE_PERMISSION_CHOICES:
        raise ValueError(f"DELETE_NOTE_PERMISSION must be one of {DELETE_PERMISSION_CHOICES}")
    max_note_length = int(os.environ.get("MAX_NOTE_LENGTH", "100000"))
    forbidden_aliases = tuple(split_csv(os.environ.get("NOTE_FORBIDDEN_ALIASES")))
    return Settings(
        notes_dir=notes_dir,
        api_auth_mode=api_auth_mode,
        api_auth_token=api_auth_token,
        api_debug_log=api_debug_log,
        auth_user_header=auth_user_header,
        auth_groups_header=auth_groups_header,
        guest_create_enabled=guest_create_enabled,
        delete_note_permission=delete_note_permission,
        max_note_length=max_note_length,
        forbidden_aliases=forbidden_aliases,
    )
