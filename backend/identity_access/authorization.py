"""
Authorization predicates evaluated per call.

Why:
    Every public operation names exactly one predicate that must hold before it
    touches state. Keeping them as plain, stateless checks over the registry
    makes the rules easy to read side by side and to test in isolation.

Predicates:
    - owner_only(caller)                      caller is the owner
    - role_only(caller, role)                 caller holds `role`
    - owner_or_teacher_of_code(caller, code)  owner, or caller's linked code == code
    - self_student_only(caller, roll_number)  caller's linked roll number == roll_number
    - owner_or_recruiter(caller)              owner, or active recruiter

Violations surface uniformly as `NotAuthorized` through `require`.
"""
from __future__ import annotations

import logging
from typing import Optional

from backend.identity_access.domain import RECRUITER
from backend.identity_access.registry import IdentityRegistry
from backend.records.errors import NotAuthorized
from backend.records.state import mask_identity

logger = logging.getLogger("registrar.identity_access")


class AuthorizationGate:
    def __init__(self, registry: IdentityRegistry) -> None:
        self._registry = registry

    def owner_only(self, caller: Optional[str]) -> bool:
        return self._registry.is_owner(caller)

    def role_only(self, caller: Optional[str], role: str) -> bool:
        return self._registry.has_role(caller, role)

    def owner_or_teacher_of_code(self, caller: Optional[str], code: str) -> bool:
        if self._registry.is_owner(caller):
            return True
        linked = self._registry.teacher_code_of(caller)
        return linked is not None and linked == code

    def self_student_only(self, caller: Optional[str], roll_number: str) -> bool:
        linked = self._registry.roll_number_of(caller)
        return linked is not None and linked == roll_number

    def owner_or_recruiter(self, caller: Optional[str]) -> bool:
        return self._registry.is_owner(caller) or self._registry.has_role(caller, RECRUITER)

    def require(self, allowed: bool, *, operation: str, caller: Optional[str]) -> None:
        if allowed:
            return
        logger.info("Denied %s for caller=%s", operation, mask_identity(caller))
        raise NotAuthorized(operation)


__all__ = ["AuthorizationGate"]
