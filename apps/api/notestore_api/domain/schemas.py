from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class UserPermissionOut(BaseModel):
    username: str
    can_edit: bool


class GroupPermissionOut(BaseModel):
    groupname: str
    can_edit: bool


class NotePermissionsOut(BaseModel):
    owner: Optional[str] = None
    shared_to_users: list[UserPermissionOut] = Field(default_factory=list)
    shared_to_groups: list[GroupPermissionOut] = Field(default_factory=list)


class NoteMetadataOut(BaseModel):
    id: str
    alias: Optional[str] = None
    title: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    created_at: str
    updated_at: str
    update_user: Optional[str] = None
    edited_by: list[str] = Field(default_factory=list)
    permissions: NotePermissionsOut
    frontmatter_error: Optional[str] = None


class NoteOut(BaseModel):
    content: str
    metadata: NoteMetadataOut


class UserPermissionIn(BaseModel):
    username: str = Field(min_length=1)
    can_edit: bool = False


class GroupPermissionIn(BaseModel):
    groupname: str = Field(min_length=1)
    can_edit: bool = False


class NotePermissionsUpdateIn(BaseModel):
    shared_to_users: list[UserPermissionIn] = Field(default_factory=list)
    shared_to_groups: list[GroupPermissionIn] = Field(default_factory=list)


class RevisionMetaOut(BaseModel):
    id: int
    length: int
    created_at: str
    author: Optional[str] = None


class RevisionOut(RevisionMetaOut):
    content: str
