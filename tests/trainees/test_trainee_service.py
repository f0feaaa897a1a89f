from __future__ import annotations

import pytest

from src.absence_tracker.absence_tracker.core.enums import Role
from src.absence_tracker.absence_tracker.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.absence_tracker.absence_tracker.scoring.calculator.standard_calculator import StandardNoteCalculator
from src.absence_tracker.absence_tracker.trainees.service import TraineeService


def test_statistics_use_standard_note(trainees_repo, absences_repo):
    stats = TraineeService(trainees_repo, absences_repo).get_statistics("CEF001")

    # 7.5h validated unjustified, 1 validated late (not yet an hour)
    assert stats.total_absence_hours == 7.5
    assert stats.disciplinary_note == 18.5
    assert stats.disciplinary_status == {"text": "1er AVERT (SC)", "color": "#235a8c"}
    assert stats.late_count == 1
    assert stats.absent_count == 2
    assert stats.justified_count == 0


def test_statistics_unknown_trainee(trainees_repo, absences_repo):
    with pytest.raises(NotFoundError):
        TraineeService(trainees_repo, absences_repo).get_statistics("NOPE")


def test_list_with_stats_uses_points_note(trainees_repo, absences_repo):
    rows = TraineeService(trainees_repo, absences_repo).list_with_stats(groupe="DEV101")

    assert [r["cef"] for r in rows] == ["CEF001", "CEF002"]
    sara, omar = rows
    assert sara["totalAbsenceHours"] == 7.5
    assert sara["disciplinaryNote"] == 19
    assert len(sara["absences"]) == 4
    assert omar["totalAbsenceHours"] == 0
    assert omar["disciplinaryStatus"]["text"] == "NORMAL"
    assert omar["disciplinaryNote"] == 20


def test_list_with_stats_calculator_can_be_overridden(trainees_repo, absences_repo):
    svc = TraineeService(trainees_repo, absences_repo, list_calculator=StandardNoteCalculator())
    assert svc.list_with_stats(groupe="DEV101")[0]["disciplinaryNote"] == 18.5


def test_list_trainees_has_no_absence_rows(trainees_repo, absences_repo):
    rows = TraineeService(trainees_repo, absences_repo).list_trainees()
    assert len(rows) == 3
    assert "absences" not in rows[0]
    assert rows[0]["disciplinaryNote"] == 18.5


def test_absences_newest_first(trainees_repo, absences_repo):
    rows = TraineeService(trainees_repo, absences_repo).get_absences("CEF001")
    assert [r["date"] for r in rows][:2] == ["2025-11-30", "2025-11-30"]
    assert rows[-1]["date"] == "2025-11-24"
    assert rows[-1]["start_time"] == "08:30"


def test_create_trainee(trainees_repo, absences_repo):
    svc = TraineeService(trainees_repo, absences_repo)
    trainee = svc.create_trainee(
        current_role=Role.SG, cef=" CEF010 ", name="Dahbi", first_name="Yassine", groupe="DEV102", phone=""
    )
    assert trainee.cef == "CEF010"
    assert trainee.phone is None
    assert trainees_repo.get_by_cef("CEF010") is not None


def test_create_trainee_rules(trainees_repo, absences_repo):
    svc = TraineeService(trainees_repo, absences_repo)
    with pytest.raises(AuthorizationError):
        svc.create_trainee(current_role=Role.TEACHER, cef="X", name="a", first_name="b", groupe="c")
    with pytest.raises(ValidationError):
        svc.create_trainee(current_role=Role.ADMIN, cef="CEF001", name="a", first_name="b", groupe="c")
    with pytest.raises(ValidationError):
        svc.create_trainee(current_role=Role.ADMIN, cef="CEF011", name=" ", first_name="b", groupe="c")
