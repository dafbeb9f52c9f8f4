from __future__ import annotations

from fastapi import Depends, Request

from notestore_api.config import Settings
from notestore_api.dependencies import get_settings
from notestore_api.domain.entities import Identity
from notestore_api.util import split_csv


def identity_from_headers(headers, settings: Settings) -> Identity:
    """Builds the requester identity set by the upstream authentication proxy."""
    username = (headers.get(settings.auth_user_header) or "").strip()
    if not username:
        return Identity.guest()
    groups = frozenset(split_csv(headers.get(settings.auth_groups_header)))
    return Identity(username=username, groups=groups)


def get_identity(request: Request, settings: Settings = Depends(get_settings)) -> Identity:
    return identity_from_headers(request.headers, settings)
