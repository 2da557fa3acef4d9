"""
Error taxonomy for the record store.

Every failure is terminal for the call that raised it and leaves state
unchanged. Each kind carries a stable `code` used by the web layer for
error bodies, and subclasses the closest builtin so callers may also catch
`PermissionError`/`LookupError`/`ValueError`.
"""
from __future__ import annotations


class RecordsError(Exception):
    code = "records_error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.code)
        self.detail = detail


class NotAuthorized(RecordsError, PermissionError):
    code = "not_authorized"


class AlreadyActive(RecordsError):
    code = "already_active"


class NotActive(RecordsError):
    code = "not_active"


class AlreadyRedeemed(RecordsError):
    code = "already_redeemed"


class InvalidCredential(RecordsError, ValueError):
    code = "invalid_credential"


class NotFound(RecordsError, LookupError):
    code = "not_found"


class InvalidSemester(RecordsError, ValueError):
    code = "invalid_semester"


class InvalidInput(RecordsError, ValueError):
    code = "invalid_input"


__all__ = [
    "RecordsError",
    "NotAuthorized",
    "AlreadyActive",
    "NotActive",
    "AlreadyRedeemed",
    "InvalidCredential",
    "NotFound",
    "InvalidSemester",
    "InvalidInput",
]
