"""
One-time passwords gating review submission.

Intent:
    Teachers receive a pool of 5-digit passwords per (teacher code, subject
    code) at activation. Students redeem one password per review. Redemption
    is tracked globally: a value redeemed under one pool is burnt everywhere,
    even if another pool happens to contain the same number.

Derivation:
    SHA-256 over a fixed-order, length-prefixed UTF-8 encoding of
    (issuer identity, code, subject code) followed by the 8-byte big-endian
    index, reduced modulo 100000. Reproducible from the same inputs, not
    practically invertible.
"""
from __future__ import annotations

import hashlib
import logging
from typing import List, Optional

from backend.records.errors import AlreadyRedeemed
from backend.records.state import SystemState
from backend.records.validation import (
    PASSWORD_SPACE,
    normalize_count,
    normalize_key,
    normalize_password,
)
from backend.storage.keys import pool_key, redeemed_key

logger = logging.getLogger("registrar.records")


def derive_password(issuer_identity: str, code: str, subject_code: str, index: int) -> int:
    digest = hashlib.sha256()
    for part in (issuer_identity, code, subject_code):
        data = part.encode("utf-8")
        digest.update(len(data).to_bytes(4, "big"))
        digest.update(data)
    digest.update(int(index).to_bytes(8, "big"))
    return int.from_bytes(digest.digest(), "big") % PASSWORD_SPACE


def derive_pool(issuer_identity: str, code: str, subject_code: str, count: int) -> List[int]:
    return [derive_password(issuer_identity, code, subject_code, i) for i in range(count)]


class CredentialVault:
    def __init__(self, state: SystemState) -> None:
        self._state = state

    def issue_passwords(self, teacher_identity: str, code: str, subject_code: str, count: int) -> List[int]:
        """Derive and store the pool for (code, subject_code), replacing any previous pool."""
        issuer = normalize_key(teacher_identity, "identity")
        code = normalize_key(code, "code")
        subject_code = normalize_key(subject_code, "subject_code")
        count = normalize_count(count)
        pool = derive_pool(issuer, code, subject_code, count)
        with self._state.lock:
            self._state.store.set(pool_key(code, subject_code), pool)
        logger.debug("Issued %d passwords for %s/%s", count, code, subject_code)
        return pool

    def pool(self, code: str, subject_code: str) -> List[int]:
        code = normalize_key(code, "code")
        subject_code = normalize_key(subject_code, "subject_code")
        stored: Optional[list] = self._state.store.get(pool_key(code, subject_code))
        return list(stored or [])

    def is_issued(self, code: str, subject_code: str, password: int) -> bool:
        password = normalize_password(password)
        return any(p == password for p in self.pool(code, subject_code))

    def is_redeemed(self, password: int) -> bool:
        password = normalize_password(password)
        return bool(self._state.store.get(redeemed_key(password)))

    def redeem(self, password: int) -> None:
        """Atomically mark `password` redeemed; AlreadyRedeemed if it was."""
        password = normalize_password(password)

        def _check_and_set(current: object) -> bool:
            if current:
                raise AlreadyRedeemed()
            return True

        with self._state.lock:
            self._state.store.update(redeemed_key(password), _check_and_set)

    def release(self, password: int) -> None:
        """Undo a redemption whose dependent write failed."""
        password = normalize_password(password)
        with self._state.lock:
            self._state.store.delete(redeemed_key(password))
        logger.warning("Redemption released after failed write")


__all__ = ["PASSWORD_SPACE", "CredentialVault", "derive_password", "derive_pool"]
