"""AuthorizationGate predicates evaluated against live registry state."""
from __future__ import annotations

import pytest

from backend.identity_access.domain import RECRUITER, STUDENT, TEACHER
from backend.records.errors import NotAuthorized


@pytest.fixture
def gate(service):
    reg = service.registry
    reg.activate_teacher("0xT", "CS01", ["CS101"], [1])
    reg.activate_student("0xS", "R100")
    reg.activate_recruiter("0xR")
    return service.gate


def test_owner_only(gate, service):
    assert gate.owner_only(service.owner)
    for caller in ("0xT", "0xS", "0xR", "stranger", None, ""):
        assert not gate.owner_only(caller)


def test_role_only(gate):
    assert gate.role_only("0xT", TEACHER)
    assert gate.role_only("0xS", STUDENT)
    assert gate.role_only("0xR", RECRUITER)
    assert not gate.role_only("0xT", STUDENT)
    assert not gate.role_only(None, STUDENT)


@pytest.mark.parametrize("code, expected", [("CS01", True), ("CS02", False), ("", False)])
def test_owner_or_teacher_of_code_for_teacher(gate, code, expected):
    assert gate.owner_or_teacher_of_code("0xT", code) is expected


@pytest.mark.parametrize("code", ["CS01", "CS02", "anything"])
def test_owner_or_teacher_of_code_for_owner(gate, service, code):
    assert gate.owner_or_teacher_of_code(service.owner, code)


def test_owner_or_teacher_of_code_fails_after_deactivation(gate, service):
    service.registry.deactivate_teacher("0xT")
    assert not gate.owner_or_teacher_of_code("0xT", "CS01")


def test_self_student_only(gate, service):
    assert gate.self_student_only("0xS", "R100")
    assert not gate.self_student_only("0xS", "R200")
    assert not gate.self_student_only(service.owner, "R100")
    service.registry.deactivate_student("0xS")
    assert not gate.self_student_only("0xS", "R100")


def test_owner_or_recruiter(gate, service):
    assert gate.owner_or_recruiter(service.owner)
    assert gate.owner_or_recruiter("0xR")
    assert not gate.owner_or_recruiter("0xS")
    assert not gate.owner_or_recruiter("0xT")


def test_require_raises_not_authorized(gate):
    gate.require(True, operation="noop", caller="x")
    with pytest.raises(NotAuthorized) as excinfo:
        gate.require(False, operation="publish_grade_sheet", caller="0xS")
    assert excinfo.value.code == "not_authorized"
    assert isinstance(excinfo.value, PermissionError)
