"""Record store service layer (public operation surface).

Why:
    Encapsulates every public operation behind one framework-free facade so
    the web adapter stays thin and the authorization rules can be unit-tested
    without FastAPI. Each operation names exactly one authorization predicate
    and checks it before touching state.

Permissions:
    | operation                     | predicate                         |
    |-------------------------------|-----------------------------------|
    | activate/deactivate_*         | owner_only                        |
    | get_teacher                   | owner_or_teacher_of_code          |
    | get_passwords                 | owner_or_teacher_of_code          |
    | get_review                    | owner_or_teacher_of_code          |
    | submit_review                 | role_only(student)                |
    | publish_grade_sheet           | owner_only (+ positive semester)  |
    | get_grade_sheet_as_student    | self_student_only                 |
    | get_grade_sheet_as_recruiter  | owner_or_recruiter                |
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from backend.identity_access.authorization import AuthorizationGate
from backend.identity_access.domain import STUDENT
from backend.identity_access.registry import IdentityRegistry
from backend.records.config import RecordsConfig, load_records_config
from backend.records.credentials import CredentialVault
from backend.records.errors import NotFound
from backend.records.events import EventSink, LoggingEventSink
from backend.records.gradesheets import GradeSheetStore
from backend.records.reviews import Review, ReviewLedger
from backend.records.state import SystemState
from backend.records.validation import normalize_key
from backend.storage.ports import KeyValueStore


@dataclass
class RecordsService:
    """Use cases for the record store (framework-independent)."""

    state: SystemState
    registry: IdentityRegistry
    gate: AuthorizationGate
    vault: CredentialVault
    reviews: ReviewLedger
    gradesheets: GradeSheetStore

    @classmethod
    def create(
        cls,
        owner: str,
        store: KeyValueStore,
        *,
        sink: Optional[EventSink] = None,
        rating_min: int = 0,
        rating_max: int = 10,
    ) -> "RecordsService":
        state = SystemState(owner=owner, store=store, sink=sink or LoggingEventSink())
        vault = CredentialVault(state)
        registry = IdentityRegistry(state, vault)
        gate = AuthorizationGate(registry)
        return cls(
            state=state,
            registry=registry,
            gate=gate,
            vault=vault,
            reviews=ReviewLedger(state, vault, rating_min=rating_min, rating_max=rating_max),
            gradesheets=GradeSheetStore(state, registry, gate),
        )

    @property
    def owner(self) -> str:
        return self.state.owner

    # --- Role administration (owner only) ----------------------------------

    def activate_teacher(
        self,
        caller: str,
        identity: str,
        code: str,
        subject_codes: Sequence[str],
        counts_per_subject: Sequence[int],
    ) -> dict:
        self.gate.require(self.gate.owner_only(caller), operation="activate_teacher", caller=caller)
        return self.registry.activate_teacher(identity, code, subject_codes, counts_per_subject)

    def deactivate_teacher(self, caller: str, identity: str) -> str:
        self.gate.require(self.gate.owner_only(caller), operation="deactivate_teacher", caller=caller)
        return self.registry.deactivate_teacher(identity)

    def activate_student(self, caller: str, identity: str, roll_number: str) -> dict:
        self.gate.require(self.gate.owner_only(caller), operation="activate_student", caller=caller)
        return self.registry.activate_student(identity, roll_number)

    def deactivate_student(self, caller: str, identity: str) -> str:
        self.gate.require(self.gate.owner_only(caller), operation="deactivate_student", caller=caller)
        return self.registry.deactivate_student(identity)

    def activate_recruiter(self, caller: str, identity: str) -> None:
        self.gate.require(self.gate.owner_only(caller), operation="activate_recruiter", caller=caller)
        self.registry.activate_recruiter(identity)

    def deactivate_recruiter(self, caller: str, identity: str) -> None:
        self.gate.require(self.gate.owner_only(caller), operation="deactivate_recruiter", caller=caller)
        self.registry.deactivate_recruiter(identity)

    # --- Teacher records ---------------------------------------------------

    def get_teacher(self, caller: str, code: str) -> dict:
        self.gate.require(self.gate.owner_or_teacher_of_code(caller, code), operation="get_teacher", caller=caller)
        code = normalize_key(code, "code")
        subjects = self.registry.teacher_subjects(code)
        if subjects is None:
            raise NotFound("teacher_not_found")
        return {"code": code, "subject_codes": subjects}

    def get_passwords(self, caller: str, code: str, subject_code: str) -> List[int]:
        self.gate.require(self.gate.owner_or_teacher_of_code(caller, code), operation="get_passwords", caller=caller)
        pool = self.vault.pool(code, subject_code)
        if not pool:
            raise NotFound("pool_not_found")
        return pool

    def get_review(self, caller: str, code: str, subject_code: str) -> List[Review]:
        self.gate.require(self.gate.owner_or_teacher_of_code(caller, code), operation="get_review", caller=caller)
        return self.reviews.list_reviews(code, subject_code)

    def submit_review(
        self,
        caller: str,
        code: str,
        subject_code: str,
        rating: int,
        comments: str,
        password: int,
    ) -> Review:
        self.gate.require(self.gate.role_only(caller, STUDENT), operation="submit_review", caller=caller)
        return self.reviews.submit_review(code, subject_code, rating, comments, password)

    # --- Grade sheets ------------------------------------------------------

    def publish_grade_sheet(self, caller: str, roll_number: str, semester: int, reference: str) -> None:
        self.gate.require(self.gate.owner_only(caller), operation="publish_grade_sheet", caller=caller)
        self.gradesheets.publish(roll_number, semester, reference)

    def get_grade_sheet_as_student(self, caller: str, semester: int) -> str:
        return self.gradesheets.read_as_student(caller, semester)

    def get_grade_sheet_as_recruiter(self, caller: str, roll_number: str, semester: int) -> str:
        return self.gradesheets.read_as_recruiter(caller, roll_number, semester)


def build_service_from_env(config: Optional[RecordsConfig] = None) -> RecordsService:
    """Wire a RecordsService from environment configuration.

    Raises ValueError when REGISTRAR_OWNER_IDENTITY is unset.
    """
    from backend.storage.kv_db import build_store_from_env

    cfg = config or load_records_config()
    if not cfg.owner_identity:
        raise ValueError("REGISTRAR_OWNER_IDENTITY must be set")
    return RecordsService.create(
        cfg.owner_identity,
        build_store_from_env(cfg),
        rating_min=cfg.rating_min,
        rating_max=cfg.rating_max,
    )


__all__ = ["RecordsService", "build_service_from_env"]
