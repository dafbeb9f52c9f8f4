import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from notestore_api.dependencies import get_note_service
from notestore_api.domain.schemas import (
    NoteMetadataOut,
    NoteOut,
    NotePermissionsOut,
    NotePermissionsUpdateIn,
    RevisionMetaOut,
    RevisionOut,
)
from notestore_api.interface.api.guard import AccessContext, require_permission
from notestore_api.notes import NoteService
from notestore_api import operations as ops

router = APIRouter()
logger = logging.getLogger("notestore.api")


async def read_markdown_body(request: Request) -> str:
    raw = await request.body()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise HTTPException(status_code=400, detail="invalid_body") from e
    logger.debug("raw_markdown", extra={"rid": getattr(request.state, "request_id", ""), "chars": len(text)})
    return text.strip()


@router.get("/health")
def health():
    return {"ok": True}


@router.post("/notes", response_model=NoteOut, status_code=201)
def create_note(
    ctx: AccessContext = Depends(require_permission(ops.NOTE_CREATE)),
    body: str = Depends(read_markdown_body),
    service: NoteService = Depends(get_note_service),
):
    note = service.create(ctx.identity, body)
    return service.to_dto(note)


@router.post("/notes/{alias}", response_model=NoteOut, status_code=201)
def create_named_note(
    alias: str,
    ctx: AccessContext = Depends(require_permission(ops.NOTE_CREATE_NAMED)),
    body: str = Depends(read_markdown_body),
    service: NoteService = Depends(get_note_service),
):
    note = service.create(ctx.identity, body, alias=alias)
    return service.to_dto(note)


@router.get("/notes/{note_id_or_alias}", response_model=NoteOut)
def get_note(
    ctx: AccessContext = Depends(require_permission(ops.NOTE_READ)),
    service: NoteService = Depends(get_note_service),
):
    return service.to_dto(ctx.note)


@router.put("/notes/{note_id_or_alias}", response_model=NoteOut)
def update_note(
    ctx: AccessContext = Depends(require_permission(ops.NOTE_UPDATE)),
    body: str = Depends(read_markdown_body),
    service: NoteService = Depends(get_note_service),
):
    note = service.update(ctx.identity, ctx.note, body)
    return service.to_dto(note)


@router.delete("/notes/{note_id_or_alias}", status_code=204)
def delete_note(
    ctx: AccessContext = Depends(require_permission(ops.NOTE_DELETE)),
    service: NoteService = Depends(get_note_service),
):
    service.delete(ctx.note)
    return Response(status_code=204)


@router.get("/notes/{note_id_or_alias}/content")
def get_note_content(ctx: AccessContext = Depends(require_permission(ops.NOTE_CONTENT))):
    return Response(content=ctx.note.content, media_type="text/markdown")


@router.get("/notes/{note_id_or_alias}/metadata", response_model=NoteMetadataOut)
def get_note_metadata(
    ctx: AccessContext = Depends(require_permission(ops.NOTE_METADATA)),
    service: NoteService = Depends(get_note_service),
):
    return service.metadata(ctx.note)


@router.put("/notes/{note_id_or_alias}/permissions", response_model=NotePermissionsOut)
def update_note_permissions(
    payload: NotePermissionsUpdateIn,
    ctx: AccessContext = Depends(require_permission(ops.NOTE_PERMISSIONS_UPDATE)),
    service: NoteService = Depends(get_note_service),
):
    note = service.update_permissions(ctx.note, payload)
    return service.permissions(note)


@router.get("/notes/{note_id_or_alias}/revisions", response_model=list[RevisionMetaOut])
def list_note_revisions(
    ctx: AccessContext = Depends(require_permission(ops.NOTE_REVISIONS_LIST)),
    service: NoteService = Depends(get_note_service),
):
    return [RevisionMetaOut(**r.__dict__) for r in service.list_revisions(ctx.note)]


@router.get("/notes/{note_id_or_alias}/revisions/{revision_id}", response_model=RevisionOut)
def get_note_revision(
    revision_id: int,
    ctx: AccessContext = Depends(require_permission(ops.NOTE_REVISIONS_GET)),
    service: NoteService = Depends(get_note_service),
):
    return RevisionOut(**service.get_revision(ctx.note, revision_id).__dict__)
