from __future__ import annotations

from datetime import date, time

import pytest

from src.absence_tracker.absence_tracker.absences.service import AbsenceService
from src.absence_tracker.absence_tracker.core.enums import AbsenceStatus, Role
from src.absence_tracker.absence_tracker.core.exceptions import AuthorizationError, NotFoundError, ValidationError


@pytest.fixture
def svc(absences_repo, fixed_now):
    return AbsenceService(absences_repo, clock=lambda: fixed_now)


ROLL_CALL = [
    {"trainee_id": 1, "status": "absent"},
    {"trainee_id": 2, "status": "late"},
    {"trainee_id": 3},
]


def record(svc, *, students=ROLL_CALL, start="08:30", end="11:00"):
    return svc.record_session(
        current_role=Role.TEACHER,
        groupe="DEV101",
        session_date=date(2025, 11, 27),
        start_time=start,
        end_time=end,
        students=students,
        teacher_id=12,
    )


def test_record_session_sets_hours_from_status(svc, absences_repo):
    data = record(svc)

    assert data["group"] == "DEV101"
    assert data["date"] == "2025-11-27"
    assert data["teacher_id"] == 12
    rows = data["trainee_absences"]
    assert [(r["status"], r["absence_hours"]) for r in rows] == [("absent", 2.5), ("late", 1.0), ("present", 0.0)]
    assert not any(r["is_validated"] or r["is_justified"] for r in rows)
    assert absences_repo.get_session(data["id"]).start_time == time(8, 30)


def test_recorded_absences_only_count_once_validated(svc, absences_repo):
    data = record(svc, students=[{"trainee_id": 3, "status": "absent"}])
    absence_id = data["trainee_absences"][0]["id"]

    event = absences_repo.get_by_id(absence_id).to_event()
    assert event.status == AbsenceStatus.ABSENT
    assert event.is_validated is False


def test_record_session_rejects_bad_rows_before_writing(svc, absences_repo):
    with pytest.raises(ValidationError):
        record(svc, students=[{"trainee_id": 1, "status": "absent"}, {"trainee_id": 2, "status": "sick"}])
    with pytest.raises(ValidationError):
        record(svc, students=[{"trainee_id": "x"}])

    assert len(absences_repo.sessions) == 3
    assert len(absences_repo.absences) == 6


def test_record_session_needs_a_forward_time_range(svc):
    with pytest.raises(ValidationError):
        record(svc, start="11:00", end="08:30")
    with pytest.raises(ValidationError):
        record(svc, start="8h30")


def test_session_detail(svc):
    data = svc.session_detail(1)
    assert data["start_time"] == "08:30"
    assert sorted(r["id"] for r in data["trainee_absences"]) == [1, 5]

    with pytest.raises(NotFoundError):
        svc.session_detail(99)


def test_new_time_range_recomputes_stored_hours(svc):
    session_id = record(svc)["id"]

    data = svc.update_session(current_role=Role.SG, session_id=session_id, end_time="13:30")

    assert data["end_time"] == "13:30"
    assert [r["absence_hours"] for r in data["trainee_absences"]] == [5.0, 1.0, 0.0]
    assert data["teacher_id"] == 12


def test_update_session_students_replace_rows(svc, absences_repo):
    session_id = record(svc)["id"]

    data = svc.update_session(
        current_role=Role.ADMIN,
        session_id=session_id,
        students=[{"trainee_id": 2, "status": "absent"}],
        teacher_id=None,
    )

    assert [(r["trainee_id"], r["absence_hours"]) for r in data["trainee_absences"]] == [(2, 2.5)]
    assert data["teacher_id"] is None
    assert len(absences_repo.list_for_sessions([session_id])) == 1


def test_update_session_needs_supervisor(svc):
    with pytest.raises(AuthorizationError):
        svc.update_session(current_role=Role.TEACHER, session_id=1, end_time="12:00")
    with pytest.raises(NotFoundError):
        svc.update_session(current_role=Role.SG, session_id=99)


def test_delete_session_removes_rows(svc, absences_repo):
    svc.delete_session(current_role=Role.SG, session_id=1)

    assert absences_repo.get_session(1) is None
    assert absences_repo.get_by_id(1) is None
    assert absences_repo.get_by_id(5) is None
    with pytest.raises(NotFoundError):
        svc.delete_session(current_role=Role.SG, session_id=1)
