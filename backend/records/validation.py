"""Input normalisation shared by the registry, vault and ledgers.

All helpers raise `InvalidInput` (or `InvalidSemester`) before any state is
touched, so a rejected call never leaves partial writes behind.
"""
from __future__ import annotations

from typing import List, Sequence

from backend.records.errors import InvalidInput, InvalidSemester

PASSWORD_SPACE = 100_000


def normalize_key(value: object, field: str) -> str:
    if not isinstance(value, str):
        raise InvalidInput(f"invalid_{field}")
    trimmed = value.strip()
    if not trimmed:
        raise InvalidInput(f"invalid_{field}")
    return trimmed


def normalize_keys(values: object, field: str) -> List[str]:
    if isinstance(values, str) or not isinstance(values, Sequence):
        raise InvalidInput(f"invalid_{field}")
    return [normalize_key(v, field) for v in values]


def normalize_count(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInput("invalid_count")
    return value


def normalize_password(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < PASSWORD_SPACE:
        raise InvalidInput("invalid_password")
    return value


def normalize_semester(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidSemester("semester_must_be_positive")
    return value


def normalize_rating(value: object, *, minimum: int, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput("invalid_rating")
    if value < minimum or value > maximum:
        raise InvalidInput("invalid_rating")
    return value


def normalize_comments(value: object) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidInput("invalid_comments")
    return value.strip()


__all__ = [
    "PASSWORD_SPACE",
    "normalize_key",
    "normalize_keys",
    "normalize_count",
    "normalize_password",
    "normalize_semester",
    "normalize_rating",
    "normalize_comments",
]
