"""
Identity domain constants.

Why:
- Centralize role names to avoid drift between the registry, the
  authorization gate and the web layer.
- The owner is not a role set member; it is a single identity fixed when the
  system state is created.
"""

from __future__ import annotations

TEACHER = "teacher"
STUDENT = "student"
RECRUITER = "recruiter"

# Role sets administered by the owner. Immutable to prevent accidental mutation.
ALLOWED_ROLES = frozenset({TEACHER, STUDENT, RECRUITER})

__all__ = ["TEACHER", "STUDENT", "RECRUITER", "ALLOWED_ROLES"]
