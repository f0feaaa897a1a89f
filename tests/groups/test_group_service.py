from __future__ import annotations

from datetime import date

import pytest

from src.absence_tracker.absence_tracker.core.enums import Role
from src.absence_tracker.absence_tracker.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.absence_tracker.absence_tracker.groups.service import GroupService


@pytest.fixture
def svc(groups_repo, trainees_repo, absences_repo):
    return GroupService(groups_repo, trainees_repo, absences_repo)


def test_list_groups_sorted_by_name(svc):
    assert [g.name for g in svc.list_groups()] == ["DEV101", "DEV102"]


def test_create_group(svc):
    group = svc.create_group(current_role=Role.ADMIN, name=" DEV201 ", filiere="Réseaux", annee="")

    assert group.name == "DEV201"
    assert group.annee is None
    assert svc.get_group(group.group_id).filiere == "Réseaux"


def test_create_group_rules(svc):
    with pytest.raises(AuthorizationError):
        svc.create_group(current_role=Role.TEACHER, name="DEV201")
    with pytest.raises(ValidationError):
        svc.create_group(current_role=Role.SG, name="DEV101")
    with pytest.raises(ValidationError):
        svc.create_group(current_role=Role.SG, name="  ")


def test_update_group_keeps_missing_fields(svc):
    group = svc.update_group(current_role=Role.SG, group_id=1, annee="2A")

    assert group.name == "DEV101"
    assert group.filiere == "Développement digital"
    assert svc.get_group(1).annee == "2A"


def test_update_group_rejects_taken_name(svc):
    with pytest.raises(ValidationError):
        svc.update_group(current_role=Role.SG, group_id=1, name="DEV102")


def test_delete_group(svc):
    svc.delete_group(current_role=Role.ADMIN, group_id=2)
    with pytest.raises(NotFoundError):
        svc.get_group(2)


def test_group_trainees(svc):
    assert [t.cef for t in svc.group_trainees("DEV101")] == ["CEF001", "CEF002"]
    with pytest.raises(NotFoundError):
        svc.group_trainees("DEV999")


def test_group_absences_newest_first(svc):
    sessions = svc.group_absences("DEV101")

    assert [s["date"] for s in sessions] == ["2025-11-30", "2025-11-25", "2025-11-24"]
    assert sorted(r["id"] for r in sessions[0]["trainee_absences"]) == [3, 4]
    assert sessions[0]["trainee_absences"][0]["trainee"]["cef"] == "CEF001"


def test_group_absences_for_one_day(svc):
    sessions = svc.group_absences("DEV101", on=date(2025, 11, 24))

    assert len(sessions) == 1
    assert sorted(r["trainee"]["cef"] for r in sessions[0]["trainee_absences"]) == ["CEF001", "CEF002"]


def test_group_absences_half_open_range_is_ignored(svc):
    assert len(svc.group_absences("DEV101", start=date(2025, 11, 25))) == 3
