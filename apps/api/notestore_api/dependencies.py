from functools import lru_cache

from notestore_api.config import load_settings
from notestore_api.domain.access import AccessGate
from notestore_api.domain.permissions import PermissionEvaluator
from notestore_api.domain.resolver import NoteResolver
from notestore_api.notes import NoteService
from notestore_api.operations import build_operation_permissions
from notestore_api.vault import FileNoteStore

@lru_cache()
def get_settings():
    return load_settings()

@lru_cache()
def get_store():
    settings = get_settings()
    return FileNoteStore(settings.notes_dir)

@lru_cache()
def get_operation_permissions():
    return build_operation_permissions(get_settings())

@lru_cache()
def get_gate():
    settings = get_settings()
    evaluator = PermissionEvaluator(guest_create_enabled=settings.guest_create_enabled)
    return AccessGate(resolver=NoteResolver(get_store()), evaluator=evaluator)

@lru_cache()
def get_note_service():
    settings = get_settings()
    return NoteService(
        get_store(),
        max_note_length=settings.max_note_length,
        forbidden_aliases=settings.forbidden_aliases,
    )

def clear_caches():
    for getter in (get_settings, get_store, get_operation_permissions, get_gate, get_note_service):
        getter.cache_clear()
