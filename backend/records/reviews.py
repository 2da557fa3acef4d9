"""
Anonymous teacher reviews keyed by (teacher code, subject code).

Intent:
    Students spend one issued password per review. The stored review carries
    no reference to the submitting identity; role membership is checked by the
    caller (service layer) before `submit_review` runs.

Precondition order (first failure wins):
    1. pool for (code, subject_code) non-empty      -> NotFound
    2. password not redeemed anywhere               -> AlreadyRedeemed
    3. password issued in this pool                 -> InvalidCredential
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
import logging
from typing import List

from backend.records.credentials import CredentialVault
from backend.records.errors import AlreadyRedeemed, InvalidCredential, NotFound
from backend.records.events import ReviewAdded
from backend.records.state import SystemState
from backend.records.validation import (
    normalize_comments,
    normalize_key,
    normalize_password,
    normalize_rating,
)
from backend.storage.keys import reviews_key

logger = logging.getLogger("registrar.records")


@dataclass(frozen=True)
class Review:
    rating: int
    comments: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Review":
        return cls(rating=int(data["rating"]), comments=str(data.get("comments", "")))


class ReviewLedger:
    def __init__(
        self,
        state: SystemState,
        vault: CredentialVault,
        *,
        rating_min: int = 0,
        rating_max: int = 10,
    ) -> None:
        self._state = state
        self._vault = vault
        self._rating_min = rating_min
        self._rating_max = rating_max

    def submit_review(
        self,
        code: str,
        subject_code: str,
        rating: int,
        comments: str,
        password: int,
    ) -> Review:
        code = normalize_key(code, "code")
        subject_code = normalize_key(subject_code, "subject_code")
        rating = normalize_rating(rating, minimum=self._rating_min, maximum=self._rating_max)
        comments = normalize_comments(comments)
        password = normalize_password(password)
        review = Review(rating=rating, comments=comments)

        with self._state.lock:
            if not self._vault.pool(code, subject_code):
                raise NotFound("pool_not_found")
            if self._vault.is_redeemed(password):
                raise AlreadyRedeemed()
            if not self._vault.is_issued(code, subject_code, password):
                raise InvalidCredential()
            self._vault.redeem(password)
            try:
                self._state.store.update(
                    reviews_key(code, subject_code),
                    lambda current: list(current or []) + [review.to_dict()],
                )
            except Exception:
                # Review not stored: the password must stay spendable.
                self._vault.release(password)
                raise

        logger.info("Review added for %s/%s", code, subject_code)
        self._state.emit(ReviewAdded(code=code, subject_code=subject_code, rating=rating))
        return review

    def list_reviews(self, code: str, subject_code: str) -> List[Review]:
        code = normalize_key(code, "code")
        subject_code = normalize_key(subject_code, "subject_code")
        stored = self._state.store.get(reviews_key(code, subject_code)) or []
        return [Review.from_dict(item) for item in stored]


__all__ = ["Review", "ReviewLedger"]
