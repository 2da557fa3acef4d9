"""Grade-sheet publication and the student/recruiter read paths."""
from __future__ import annotations

import pytest

from backend.records.errors import InvalidInput, InvalidSemester, NotAuthorized, NotFound


@pytest.fixture
def published(service):
    owner = service.owner
    service.activate_student(owner, "0xS", "R100")
    service.activate_recruiter(owner, "0xR")
    service.publish_grade_sheet(owner, "R100", 3, "ipfs://abc")
    return service


def test_student_reads_own_semester(published):
    assert published.get_grade_sheet_as_student("0xS", 3) == "ipfs://abc"
    with pytest.raises(NotFound):
        published.get_grade_sheet_as_student("0xS", 4)


def test_unlinked_caller_cannot_read_as_student(published):
    with pytest.raises(NotAuthorized):
        published.get_grade_sheet_as_student("0xR", 3)
    with pytest.raises(NotAuthorized):
        published.get_grade_sheet_as_student(published.owner, 3)


def test_recruiter_and_owner_read_any_registered_roll(published):
    assert published.get_grade_sheet_as_recruiter("0xR", "R100", 3) == "ipfs://abc"
    assert published.get_grade_sheet_as_recruiter(published.owner, "R100", 3) == "ipfs://abc"
    with pytest.raises(NotFound):
        published.get_grade_sheet_as_recruiter("0xR", "R100", 4)
    with pytest.raises(NotFound):
        published.get_grade_sheet_as_recruiter("0xR", "R999", 3)


@pytest.mark.parametrize("caller", ["0xS", "0xStranger", None])
def test_non_owner_non_recruiter_is_rejected(published, caller):
    with pytest.raises(NotAuthorized):
        published.get_grade_sheet_as_recruiter(caller, "R100", 3)


def test_deactivated_recruiter_is_rejected(published):
    published.deactivate_recruiter(published.owner, "0xR")
    with pytest.raises(NotAuthorized):
        published.get_grade_sheet_as_recruiter("0xR", "R100", 3)


def test_deactivated_student_loses_access_but_record_stays_readable(published):
    published.deactivate_student(published.owner, "0xS")
    with pytest.raises(NotAuthorized):
        published.get_grade_sheet_as_student("0xS", 3)
    # Recruiter path checks "ever registered", not "currently active".
    assert published.get_grade_sheet_as_recruiter("0xR", "R100", 3) == "ipfs://abc"


def test_publish_overwrites(published, sink):
    published.publish_grade_sheet(published.owner, "R100", 3, "ipfs://def")
    assert published.get_grade_sheet_as_student("0xS", 3) == "ipfs://def"
    assert sink.events[-1].payload() == {"roll_number": "R100", "semester": 3, "reference": "ipfs://def"}


def test_publish_for_unregistered_roll_is_allowed(published):
    published.publish_grade_sheet(published.owner, "R555", 1, "ipfs://future")
    # Not readable by recruiters until the roll number is registered.
    with pytest.raises(NotFound):
        published.get_grade_sheet_as_recruiter("0xR", "R555", 1)
    published.activate_student(published.owner, "0xNew", "R555")
    assert published.get_grade_sheet_as_student("0xNew", 1) == "ipfs://future"


def test_empty_reference_counts_as_absent(published):
    published.publish_grade_sheet(published.owner, "R100", 2, "")
    with pytest.raises(NotFound):
        published.get_grade_sheet_as_student("0xS", 2)


@pytest.mark.parametrize("semester", [0, -1])
def test_publish_non_positive_semester_fails_before_mutation(service, store, sink, semester):
    with pytest.raises(InvalidSemester):
        service.publish_grade_sheet(service.owner, "R100", semester, "ipfs://abc")
    assert len(store) == 0
    assert sink.events == []


def test_publish_is_owner_only(published, store):
    with pytest.raises(NotAuthorized):
        published.publish_grade_sheet("0xR", "R100", 3, "ipfs://evil")
    assert published.get_grade_sheet_as_student("0xS", 3) == "ipfs://abc"


def test_publish_rejects_non_string_reference(published):
    with pytest.raises(InvalidInput):
        published.publish_grade_sheet(published.owner, "R100", 3, None)  # type: ignore[arg-type]


def test_read_with_non_positive_semester_is_invalid(published):
    with pytest.raises(InvalidSemester):
        published.get_grade_sheet_as_student("0xS", 0)


def test_recruiter_read_trims_and_rejects_empty_roll(published):
    assert published.get_grade_sheet_as_recruiter("0xR", " R100 ", 3) == "ipfs://abc"
    with pytest.raises(InvalidInput):
        published.get_grade_sheet_as_recruiter("0xR", "", 3)
    with pytest.raises(NotAuthorized):
        published.get_grade_sheet_as_recruiter("0xS", "", 3)
