"""
Grade-sheet references per (roll number, semester).

Only an opaque reference (e.g. a content address) is stored, never the
grade sheet itself. An empty reference counts as absent.

Read rules:
    - Students read their own linked roll number only.
    - Owner and active recruiters read any roll number that was ever
      registered, including roll numbers whose student has been deactivated.
"""
from __future__ import annotations

import logging

from backend.identity_access.authorization import AuthorizationGate
from backend.identity_access.registry import IdentityRegistry
from backend.records.errors import InvalidInput, NotFound
from backend.records.events import GradeSheetPublished
from backend.records.state import SystemState
from backend.records.validation import normalize_key, normalize_semester
from backend.storage.keys import gradesheet_key

logger = logging.getLogger("registrar.records")


class GradeSheetStore:
    def __init__(self, state: SystemState, registry: IdentityRegistry, gate: AuthorizationGate) -> None:
        self._state = state
        self._registry = registry
        self._gate = gate

    def publish(self, roll_number: str, semester: int, reference: str) -> None:
        """Store `reference` for (roll_number, semester), overwriting any previous one."""
        semester = normalize_semester(semester)
        roll_number = normalize_key(roll_number, "roll_number")
        if not isinstance(reference, str):
            raise InvalidInput("invalid_reference")
        with self._state.lock:
            self._state.store.set(gradesheet_key(roll_number, semester), reference)
        logger.info("Grade sheet published for roll=%s semester=%d", roll_number, semester)
        self._state.emit(GradeSheetPublished(roll_number=roll_number, semester=semester, reference=reference))

    def read(self, roll_number: str, semester: int) -> str:
        semester = normalize_semester(semester)
        roll_number = normalize_key(roll_number, "roll_number")
        reference = self._state.store.get(gradesheet_key(roll_number, semester))
        if not reference:
            raise NotFound("gradesheet_not_found")
        return reference

    def read_as_student(self, caller: str, semester: int) -> str:
        roll_number = self._registry.roll_number_of(caller)
        self._gate.require(
            roll_number is not None and self._gate.self_student_only(caller, roll_number),
            operation="get_grade_sheet_as_student",
            caller=caller,
        )
        return self.read(roll_number, semester)

    def read_as_recruiter(self, caller: str, roll_number: str, semester: int) -> str:
        self._gate.require(
            self._gate.owner_or_recruiter(caller),
            operation="get_grade_sheet_as_recruiter",
            caller=caller,
        )
        roll_number = normalize_key(roll_number, "roll_number")
        if not self._registry.roll_number_ever_valid(roll_number):
            raise NotFound("roll_number_not_found")
        return self.read(roll_number, semester)


__all__ = ["GradeSheetStore"]
