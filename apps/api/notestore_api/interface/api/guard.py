from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.dependencies.models import Dependant
from fastapi.routing import APIRoute

from notestore_api.dependencies import get_gate, get_operation_permissions
from notestore_api.domain.access import AccessDecision, AccessGate
from notestore_api.domain.entities import Identity, Note
from notestore_api.domain.exceptions import NotFoundError
from notestore_api.identity import get_identity


NOTE_PATH_PARAM = "note_id_or_alias"


@dataclass(frozen=True)
class AccessContext:
    identity: Identity
    decision: AccessDecision

    @property
    def note(self) -> Note:
        if self.decision.note is None:
            raise NotFoundError()
        return self.decision.note


def require_permission(operation: str):
    def guard(
        request: Request,
        identity: Identity = Depends(get_identity),
        gate: AccessGate = Depends(get_gate),
        permissions: dict = Depends(get_operation_permissions),
    ) -> AccessContext:
        decision = gate.authorize(
            permissions.get(operation),
            identity,
            request.path_params.get(NOTE_PATH_PARAM),
            operation=operation,
        )
        decision.raise_for_outcome()
        return AccessContext(identity=identity, decision=decision)

    guard.operation = operation
    return guard


def _dependant_operations(dependant: Dependant) -> set[str]:
    found: set[str] = set()
    for dep in dependant.dependencies:
        operation = getattr(dep.call, "operation", None)
        if operation is not None:
            found.add(operation)
        found |= _dependant_operations(dep)
    return found


def declared_operations(routes) -> set[str]:
    """Operations guarded by `require_permission` on the given routes."""
    found: set[str] = set()
    for route in routes:
        if isinstance(route, APIRoute):
            found |= _dependant_operations(route.dependant)
    return found
