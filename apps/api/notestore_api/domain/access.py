"""Request-time access check for note operations.

One linear pass per request: read the declared permission, resolve the note
unless the operation creates one, then evaluate. Denials keep their cause so
the HTTP boundary can answer 404 for unknown notes and log misconfigured
operations as defects; everything else is an ordinary 403.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from notestore_api.domain.entities import Identity, Note
from notestore_api.domain.exceptions import MisconfiguredOperationError, NotFoundError, PolicyDeniedError
from notestore_api.domain.permissions import PermissionEvaluator, PermissionLevel
from notestore_api.domain.resolver import NoteResolver


logger = logging.getLogger("notestore.access")


class Outcome(str, Enum):
    ALLOWED = "allowed"
    DENIED_MISCONFIGURED = "denied_misconfigured"
    DENIED_NOT_FOUND = "denied_not_found"
    DENIED_POLICY = "denied_policy"


@dataclass(frozen=True)
class AccessDecision:
    outcome: Outcome
    operation: str | None = None
    required: PermissionLevel | None = None
    note: Note | None = None

    @property
    def allowed(self) -> bool:
        return self.outcome is Outcome.ALLOWED

    def raise_for_outcome(self) -> None:
        if self.outcome is Outcome.DENIED_MISCONFIGURED:
            raise MisconfiguredOperationError(self.operation or "unknown_operation")
        if self.outcome is Outcome.DENIED_NOT_FOUND:
            raise NotFoundError()
        if self.outcome is Outcome.DENIED_POLICY:
            raise PolicyDeniedError(self.operation or "forbidden")


class AccessGate:
    def __init__(self, resolver: NoteResolver, evaluator: PermissionEvaluator) -> None:
        self.resolver = resolver
        self.evaluator = evaluator

    def authorize(
        self,
        required: PermissionLevel | None,
        identity: Identity,
        identifier: str | None,
        *,
        operation: str | None = None,
    ) -> AccessDecision:
        if required is None:
            logger.error("operation_missing_permission", extra={"op": operation})
            return AccessDecision(Outcome.DENIED_MISCONFIGURED, operation=operation)

        note: Note | None = None
        if required is not PermissionLevel.CREATE:
            try:
                note = self.resolver.resolve(identifier or "")
            except NotFoundError:
                return AccessDecision(Outcome.DENIED_NOT_FOUND, operation=operation, required=required)

        if not self.evaluator.evaluate(identity, required, note):
            logger.info(
                "access_denied",
                extra={
                    "op": operation,
                    "required": required.value,
                    "user": identity.username,
                    "id": note.id if note else None,
                },
            )
            return AccessDecision(Outcome.DENIED_POLICY, operation=operation, required=required, note=note)
        return AccessDecision(Outcome.ALLOWED, operation=operation, required=required, note=note)
