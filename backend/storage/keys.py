"""
Helpers to build composite keys for the flat key-value store.

Why:
    All record state lives in one store keyed by composite tuples such as
    (teacher code, subject code) or (roll number, semester). Keep key shapes
    in one place so the registry, vault and ledgers never drift apart.

Conventions:
    - Role membership:     role/{role}/{identity}
    - Identity links:      teacher-link/{identity}, student-link/{identity}
    - Roll number history: roll-valid/{roll}
    - Teacher records:     teacher/{code}
    - Credential pools:    pool/{code}/{subject}
    - Reviews:             reviews/{code}/{subject}
    - Redemptions:         redeemed/{password}
    - Grade sheets:        gradesheet/{roll}/{semester}

Security:
    - Segments are percent-encoded (nothing is "safe"), so identities or codes
      containing "/" cannot collide with other keys or escape their prefix.
"""
from __future__ import annotations

from urllib.parse import quote, unquote


def _encode_segment(value: object) -> str:
    text = str(value)
    if not text:
        raise ValueError("empty key segment")
    return quote(text, safe="")


def make_key(prefix: str, *segments: object) -> str:
    """Join a prefix and encoded segments into a store key."""
    return "/".join([prefix, *(_encode_segment(s) for s in segments)])


def split_key(key: str) -> tuple[str, ...]:
    """Inverse of make_key: return (prefix, *decoded segments)."""
    prefix, *rest = key.split("/")
    return (prefix, *(unquote(s) for s in rest))


def role_key(role: str, identity: str) -> str:
    return make_key("role", role, identity)


def teacher_link_key(identity: str) -> str:
    return make_key("teacher-link", identity)


def student_link_key(identity: str) -> str:
    return make_key("student-link", identity)


def roll_valid_key(roll_number: str) -> str:
    return make_key("roll-valid", roll_number)


def teacher_key(code: str) -> str:
    return make_key("teacher", code)


def pool_key(code: str, subject_code: str) -> str:
    return make_key("pool", code, subject_code)


def reviews_key(code: str, subject_code: str) -> str:
    return make_key("reviews", code, subject_code)


def redeemed_key(password: int) -> str:
    return make_key("redeemed", int(password))


def gradesheet_key(roll_number: str, semester: int) -> str:
    return make_key("gradesheet", roll_number, int(semester))


__all__ = [
    "make_key",
    "split_key",
    "role_key",
    "teacher_link_key",
    "student_link_key",
    "roll_valid_key",
    "teacher_key",
    "pool_key",
    "reviews_key",
    "redeemed_key",
    "gradesheet_key",
]
