from __future__ import annotations


class NotFoundError(LookupError):
    def __init__(self, detail: str = "note_not_found") -> None:
        super().__init__(detail)
        self.detail = detail


class PolicyDeniedError(PermissionError):
    pass


class MisconfiguredOperationError(RuntimeError):
    """An operation reached the access gate without a declared required permission."""


class AliasError(ValueError):
    pass


class AlreadyExistsError(Exception):
    pass


class NoteTooLongError(ValueError):
    pass
