"""IdentityRegistry: role lifecycle, identity links and retain-on-deactivate."""
from __future__ import annotations

import pytest

from backend.identity_access.domain import RECRUITER, STUDENT, TEACHER
from backend.records.credentials import derive_pool
from backend.records.errors import AlreadyActive, InvalidInput, NotActive
from backend.storage.keys import role_key


def test_activate_teacher_links_code_and_issues_pools(service, sink):
    reg = service.registry
    result = reg.activate_teacher("0xT", "CS01", ["CS101", "CS102"], [3, 2])

    assert result == {"identity": "0xT", "code": "CS01", "subject_codes": ["CS101", "CS102"]}
    assert reg.has_role("0xT", TEACHER)
    assert reg.teacher_code_of("0xT") == "CS01"
    assert reg.teacher_subjects("CS01") == ["CS101", "CS102"]
    assert service.vault.pool("CS01", "CS101") == derive_pool("0xT", "CS01", "CS101", 3)
    assert len(service.vault.pool("CS01", "CS102")) == 2
    assert sink.names() == ["TeacherActivated"]


def test_activate_teacher_twice_fails_without_changes(service, sink):
    reg = service.registry
    reg.activate_teacher("0xT", "CS01", ["CS101"], [1])
    with pytest.raises(AlreadyActive):
        reg.activate_teacher("0xT", "CS99", ["X"], [5])
    assert reg.teacher_subjects("CS99") is None
    assert reg.teacher_code_of("0xT") == "CS01"
    assert sink.names() == ["TeacherActivated"]


@pytest.mark.parametrize(
    "subjects, counts",
    [
        (["CS101"], [1, 2]),
        (["CS101", "CS102"], [1]),
        (["CS101"], [-1]),
        ([""], [1]),
        ("CS101", [1]),
    ],
)
def test_activate_teacher_rejects_malformed_input_before_mutation(service, store, subjects, counts):
    with pytest.raises(InvalidInput):
        service.registry.activate_teacher("0xT", "CS01", subjects, counts)
    assert len(store) == 0


def test_deactivate_teacher_keeps_record_and_pools(service, sink):
    reg = service.registry
    reg.activate_teacher("0xT", "CS01", ["CS101"], [2])
    pool = service.vault.pool("CS01", "CS101")

    assert reg.deactivate_teacher("0xT") == "CS01"
    assert not reg.has_role("0xT", TEACHER)
    assert reg.teacher_code_of("0xT") is None
    assert reg.teacher_subjects("CS01") == ["CS101"]
    assert service.vault.pool("CS01", "CS101") == pool
    assert sink.events[-1].payload() == {"identity": "0xT", "code": "CS01"}


def test_deactivate_unknown_teacher_fails(service):
    with pytest.raises(NotActive):
        service.registry.deactivate_teacher("0xNobody")


def test_reactivating_code_for_new_identity_overwrites_subjects(service):
    reg = service.registry
    reg.activate_teacher("0xT", "CS01", ["CS101"], [1])
    reg.activate_teacher("0xU", "CS01", ["CS201"], [1])
    assert reg.teacher_subjects("CS01") == ["CS201"]
    # Earlier pool under the same code persists.
    assert len(service.vault.pool("CS01", "CS101")) == 1


def test_student_lifecycle_keeps_roll_number_valid(service, sink):
    reg = service.registry
    reg.activate_student("0xS", "R100")
    assert reg.has_role("0xS", STUDENT)
    assert reg.roll_number_of("0xS") == "R100"
    assert reg.roll_number_ever_valid("R100")

    with pytest.raises(AlreadyActive):
        reg.activate_student("0xS", "R200")

    assert reg.deactivate_student("0xS") == "R100"
    assert reg.roll_number_of("0xS") is None
    assert not reg.has_role("0xS", STUDENT)
    assert reg.roll_number_ever_valid("R100")

    with pytest.raises(NotActive):
        reg.deactivate_student("0xS")
    assert sink.names() == ["StudentActivated", "StudentDeactivated"]


def test_recruiter_flag_toggles(service, store, sink):
    reg = service.registry
    reg.activate_recruiter("0xR")
    assert reg.has_role("0xR", RECRUITER)
    assert store.get(role_key(RECRUITER, "0xR")) is True
    with pytest.raises(AlreadyActive):
        reg.activate_recruiter("0xR")
    reg.deactivate_recruiter("0xR")
    assert not reg.has_role("0xR", RECRUITER)
    with pytest.raises(NotActive):
        reg.deactivate_recruiter("0xR")
    assert sink.names() == ["RecruiterActivated", "RecruiterDeactivated"]


def test_roles_are_not_mutually_exclusive(service):
    reg = service.registry
    reg.activate_teacher("0xX", "CS01", ["CS101"], [1])
    reg.activate_student("0xX", "R100")
    assert reg.has_role("0xX", TEACHER)
    assert reg.has_role("0xX", STUDENT)


def test_owner_is_not_a_role_member(service):
    reg = service.registry
    assert reg.is_owner(service.owner)
    assert not reg.is_owner(None)
    assert not reg.has_role(service.owner, RECRUITER)
    with pytest.raises(ValueError):
        reg.has_role(service.owner, "admin")
