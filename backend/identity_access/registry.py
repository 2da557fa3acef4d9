"""
Role sets and identity links (teacher code / roll number).

Intent:
    Own the three role sets administered by the owner and the links between an
    external identity and its internal record key. Records are never deleted:
    deactivation drops the role flag and the identity link, while teacher
    pools/reviews and student grade sheets stay under their code/roll number.

Permissions:
    Callers are expected to have passed the owner-only gate already; this
    module only enforces role-set preconditions (AlreadyActive/NotActive).

Not enforced (business rules still open):
    - An identity may hold several of teacher/student/recruiter at once.
    - Activating a second identity with a code already in use overwrites the
      subject list; earlier pools and reviews under that code persist.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from backend.identity_access.domain import ALLOWED_ROLES, RECRUITER, STUDENT, TEACHER
from backend.records.credentials import CredentialVault
from backend.records.errors import AlreadyActive, InvalidInput, NotActive
from backend.records.events import (
    RecruiterActivated,
    RecruiterDeactivated,
    StudentActivated,
    StudentDeactivated,
    TeacherActivated,
    TeacherDeactivated,
)
from backend.records.state import SystemState, mask_identity
from backend.records.validation import normalize_count, normalize_key, normalize_keys
from backend.storage.keys import (
    role_key,
    roll_valid_key,
    student_link_key,
    teacher_key,
    teacher_link_key,
)

logger = logging.getLogger("registrar.identity_access")


class IdentityRegistry:
    def __init__(self, state: SystemState, vault: CredentialVault) -> None:
        self._state = state
        self._vault = vault

    # --- Reads -------------------------------------------------------------

    def is_owner(self, identity: Optional[str]) -> bool:
        return bool(identity) and identity == self._state.owner

    def has_role(self, identity: Optional[str], role: str) -> bool:
        if role not in ALLOWED_ROLES:
            raise ValueError(f"unknown role: {role!r}")
        if not identity:
            return False
        return bool(self._state.store.get(role_key(role, identity)))

    def teacher_code_of(self, identity: Optional[str]) -> Optional[str]:
        if not identity:
            return None
        return self._state.store.get(teacher_link_key(identity))

    def roll_number_of(self, identity: Optional[str]) -> Optional[str]:
        if not identity:
            return None
        return self._state.store.get(student_link_key(identity))

    def roll_number_ever_valid(self, roll_number: str) -> bool:
        if not roll_number:
            return False
        return bool(self._state.store.get(roll_valid_key(roll_number)))

    def teacher_subjects(self, code: str) -> Optional[List[str]]:
        if not code:
            return None
        stored = self._state.store.get(teacher_key(code))
        return list(stored) if stored is not None else None

    # --- Teachers ----------------------------------------------------------

    def activate_teacher(
        self,
        identity: str,
        code: str,
        subject_codes: Sequence[str],
        counts_per_subject: Sequence[int],
    ) -> dict:
        identity = normalize_key(identity, "identity")
        code = normalize_key(code, "code")
        subjects = normalize_keys(subject_codes, "subject_code")
        if isinstance(counts_per_subject, str) or not isinstance(counts_per_subject, Sequence):
            raise InvalidInput("invalid_count")
        counts = [normalize_count(c) for c in counts_per_subject]
        if len(subjects) != len(counts):
            raise InvalidInput("subject_count_mismatch")

        with self._state.lock:
            if self.has_role(identity, TEACHER):
                raise AlreadyActive("teacher_already_active")
            store = self._state.store
            store.set(teacher_key(code), subjects)
            for subject_code, count in zip(subjects, counts):
                self._vault.issue_passwords(identity, code, subject_code, count)
            store.set(role_key(TEACHER, identity), True)
            store.set(teacher_link_key(identity), code)

        logger.info("Teacher activated: identity=%s code=%s subjects=%d", mask_identity(identity), code, len(subjects))
        self._state.emit(TeacherActivated(identity=identity, code=code))
        return {"identity": identity, "code": code, "subject_codes": subjects}

    def deactivate_teacher(self, identity: str) -> str:
        """Drop the teacher role and link; return the code the identity held."""
        identity = normalize_key(identity, "identity")
        with self._state.lock:
            code = self.teacher_code_of(identity)
            if not self.has_role(identity, TEACHER) or code is None:
                raise NotActive("teacher_not_active")
            self._state.store.delete(role_key(TEACHER, identity))
            self._state.store.delete(teacher_link_key(identity))

        logger.info("Teacher deactivated: identity=%s code=%s", mask_identity(identity), code)
        self._state.emit(TeacherDeactivated(identity=identity, code=code))
        return code

    # --- Students ----------------------------------------------------------

    def activate_student(self, identity: str, roll_number: str) -> dict:
        identity = normalize_key(identity, "identity")
        roll_number = normalize_key(roll_number, "roll_number")
        with self._state.lock:
            if self.has_role(identity, STUDENT):
                raise AlreadyActive("student_already_active")
            store = self._state.store
            store.set(role_key(STUDENT, identity), True)
            store.set(student_link_key(identity), roll_number)
            store.set(roll_valid_key(roll_number), True)

        logger.info("Student activated: identity=%s roll=%s", mask_identity(identity), roll_number)
        self._state.emit(StudentActivated(identity=identity, roll_number=roll_number))
        return {"identity": identity, "roll_number": roll_number}

    def deactivate_student(self, identity: str) -> str:
        """Drop the student role and link; the roll number stays "ever valid"."""
        identity = normalize_key(identity, "identity")
        with self._state.lock:
            roll_number = self.roll_number_of(identity)
            if not self.has_role(identity, STUDENT) or roll_number is None:
                raise NotActive("student_not_active")
            self._state.store.delete(role_key(STUDENT, identity))
            self._state.store.delete(student_link_key(identity))

        logger.info("Student deactivated: identity=%s roll=%s", mask_identity(identity), roll_number)
        self._state.emit(StudentDeactivated(identity=identity, roll_number=roll_number))
        return roll_number

    # --- Recruiters --------------------------------------------------------

    def activate_recruiter(self, identity: str) -> None:
        identity = normalize_key(identity, "identity")
        with self._state.lock:
            if self.has_role(identity, RECRUITER):
                raise AlreadyActive("recruiter_already_active")
            self._state.store.set(role_key(RECRUITER, identity), True)
        logger.info("Recruiter activated: identity=%s", mask_identity(identity))
        self._state.emit(RecruiterActivated(identity=identity))

    def deactivate_recruiter(self, identity: str) -> None:
        identity = normalize_key(identity, "identity")
        with self._state.lock:
            if not self.has_role(identity, RECRUITER):
                raise NotActive("recruiter_not_active")
            self._state.store.delete(role_key(RECRUITER, identity))
        logger.info("Recruiter deactivated: identity=%s", mask_identity(identity))
        self._state.emit(RecruiterDeactivated(identity=identity))


__all__ = ["IdentityRegistry"]
