"""
Records API routes — role administration, review credentials, grade sheets.

Why:
    Map the public operation surface of `RecordsService` onto JSON endpoints.
    Handlers stay thin: they read the caller identity resolved by the session
    middleware, call exactly one service operation and translate domain errors
    into status codes. All authorization happens in the service.

Error mapping:
    NotAuthorized -> 403, NotFound -> 404,
    AlreadyActive/NotActive/AlreadyRedeemed -> 409,
    InvalidCredential/InvalidSemester/InvalidInput -> 400.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from backend.records.errors import (
    AlreadyActive,
    AlreadyRedeemed,
    InvalidCredential,
    InvalidInput,
    InvalidSemester,
    NotActive,
    NotAuthorized,
    NotFound,
    RecordsError,
)
from backend.records.service import RecordsService, build_service_from_env

logger = logging.getLogger("registrar.web.records")

records_router = APIRouter(tags=["Records"])

_STATUS_BY_ERROR: list[tuple[type[RecordsError], int]] = [
    (NotAuthorized, 403),
    (NotFound, 404),
    (AlreadyActive, 409),
    (NotActive, 409),
    (AlreadyRedeemed, 409),
    (InvalidCredential, 400),
    (InvalidSemester, 400),
    (InvalidInput, 400),
]

SERVICE: Optional[RecordsService] = None


def get_service() -> RecordsService:
    """Return the wired service, building it from env on first use."""
    global SERVICE
    if SERVICE is None:
        SERVICE = build_service_from_env()
    return SERVICE


def set_service(service: Optional[RecordsService]) -> None:
    """Swap the service instance (tests, alternative wiring)."""
    global SERVICE
    SERVICE = service


def _private_no_store() -> dict:
    return {"Cache-Control": "private, no-store"}


def _json(body, *, status_code: int = 200) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers=_private_no_store())


def _error_response(exc: RecordsError) -> JSONResponse:
    for kind, status in _STATUS_BY_ERROR:
        if isinstance(exc, kind):
            return _json({"error": exc.code}, status_code=status)
    logger.warning("Unmapped records error: %s", exc.__class__.__name__)
    return _json({"error": exc.code}, status_code=400)


def _caller(request: Request) -> Optional[str]:
    return getattr(request.state, "identity", None)


# --- Payloads -------------------------------------------------------------------


class TeacherActivatePayload(BaseModel):
    identity: str
    code: str
    subject_codes: List[str] = Field(default_factory=list)
    counts_per_subject: List[int] = Field(default_factory=list)


class StudentActivatePayload(BaseModel):
    identity: str
    roll_number: str


class RecruiterActivatePayload(BaseModel):
    identity: str


class ReviewSubmitPayload(BaseModel):
    rating: int
    comments: str = ""
    password: int


class GradeSheetPayload(BaseModel):
    reference: str


# --- Role administration --------------------------------------------------------


@records_router.post("/api/teachers")
async def activate_teacher(request: Request, payload: TeacherActivatePayload):
    """Activate a teacher and issue its credential pools.

    Permissions:
        Owner only.
    """
    try:
        result = get_service().activate_teacher(
            _caller(request),
            payload.identity,
            payload.code,
            payload.subject_codes,
            payload.counts_per_subject,
        )
    except RecordsError as exc:
        return _error_response(exc)
    return _json(result, status_code=201)


@records_router.delete("/api/teachers/{identity}")
async def deactivate_teacher(request: Request, identity: str):
    """Deactivate a teacher; its code, pools and reviews are retained.

    Permissions:
        Owner only.
    """
    try:
        code = get_service().deactivate_teacher(_caller(request), identity)
    except RecordsError as exc:
        return _error_response(exc)
    return _json({"identity": identity, "code": code})


@records_router.post("/api/students")
async def activate_student(request: Request, payload: StudentActivatePayload):
    try:
        result = get_service().activate_student(_caller(request), payload.identity, payload.roll_number)
    except RecordsError as exc:
        return _error_response(exc)
    return _json(result, status_code=201)


@records_router.delete("/api/students/{identity}")
async def deactivate_student(request: Request, identity: str):
    try:
        roll_number = get_service().deactivate_student(_caller(request), identity)
    except RecordsError as exc:
        return _error_response(exc)
    return _json({"identity": identity, "roll_number": roll_number})


@records_router.post("/api/recruiters")
async def activate_recruiter(request: Request, payload: RecruiterActivatePayload):
    try:
        get_service().activate_recruiter(_caller(request), payload.identity)
    except RecordsError as exc:
        return _error_response(exc)
    return _json({"identity": payload.identity}, status_code=201)


@records_router.delete("/api/recruiters/{identity}")
async def deactivate_recruiter(request: Request, identity: str):
    try:
        get_service().deactivate_recruiter(_caller(request), identity)
    except RecordsError as exc:
        return _error_response(exc)
    return _json({"identity": identity})


# --- Teacher records & reviews --------------------------------------------------


@records_router.get("/api/teachers/{code}")
async def get_teacher(request: Request, code: str):
    """Return the subject codes of a teacher record.

    Permissions:
        Owner, or the teacher currently linked to `code`.
    """
    try:
        result = get_service().get_teacher(_caller(request), code)
    except RecordsError as exc:
        return _error_response(exc)
    return _json(result)


@records_router.get("/api/teachers/{code}/subjects/{subject_code}/passwords")
async def get_passwords(request: Request, code: str, subject_code: str):
    """Return the issued credential pool for (code, subject_code).

    Permissions:
        Owner, or the teacher currently linked to `code`.
    """
    try:
        pool = get_service().get_passwords(_caller(request), code, subject_code)
    except RecordsError as exc:
        return _error_response(exc)
    return _json({"code": code, "subject_code": subject_code, "passwords": pool})


@records_router.get("/api/teachers/{code}/subjects/{subject_code}/reviews")
async def get_reviews(request: Request, code: str, subject_code: str):
    try:
        reviews = get_service().get_review(_caller(request), code, subject_code)
    except RecordsError as exc:
        return _error_response(exc)
    return _json([r.to_dict() for r in reviews])


@records_router.post("/api/teachers/{code}/subjects/{subject_code}/reviews")
async def submit_review(request: Request, code: str, subject_code: str, payload: ReviewSubmitPayload):
    """Submit an anonymous review, spending one issued password.

    Permissions:
        Active students only. The response does not echo the caller.
    """
    try:
        review = get_service().submit_review(
            _caller(request),
            code,
            subject_code,
            payload.rating,
            payload.comments,
            payload.password,
        )
    except RecordsError as exc:
        return _error_response(exc)
    return _json(review.to_dict(), status_code=201)


# --- Grade sheets ---------------------------------------------------------------


@records_router.put("/api/gradesheets/{roll_number}/semesters/{semester}")
async def publish_grade_sheet(request: Request, roll_number: str, semester: int, payload: GradeSheetPayload):
    """Publish (or overwrite) the grade-sheet reference for a semester.

    Permissions:
        Owner only. Semester must be positive.
    """
    try:
        get_service().publish_grade_sheet(_caller(request), roll_number, semester, payload.reference)
    except RecordsError as exc:
        return _error_response(exc)
    return _json({"roll_number": roll_number, "semester": semester, "reference": payload.reference})


@records_router.get("/api/me/gradesheets/semesters/{semester}")
async def get_own_grade_sheet(request: Request, semester: int):
    """Return the caller's own grade-sheet reference.

    Permissions:
        Caller must be linked to a roll number.
    """
    try:
        reference = get_service().get_grade_sheet_as_student(_caller(request), semester)
    except RecordsError as exc:
        return _error_response(exc)
    return _json({"semester": semester, "reference": reference})


@records_router.get("/api/gradesheets/{roll_number}/semesters/{semester}")
async def get_grade_sheet(request: Request, roll_number: str, semester: int):
    """Return a grade-sheet reference for any registered roll number.

    Permissions:
        Owner or active recruiter.
    """
    try:
        reference = get_service().get_grade_sheet_as_recruiter(_caller(request), roll_number, semester)
    except RecordsError as exc:
        return _error_response(exc)
    return _json({"roll_number": roll_number, "semester": semester, "reference": reference})


__all__ = ["records_router", "get_service", "set_service"]
