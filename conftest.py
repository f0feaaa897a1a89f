from __future__ import annotations

import dataclasses
from datetime import date, datetime, time
from typing import Optional

import pytest

from src.absence_tracker.absence_tracker.absences.model import AbsenceSession, TraineeAbsence
from src.absence_tracker.absence_tracker.core.enums import AbsenceStatus
from src.absence_tracker.absence_tracker.groups.model import Group
from src.absence_tracker.absence_tracker.trainees.model import Trainee


class InMemoryTrainees:
    def __init__(self, trainees=()):
        self._by_cef: dict[str, Trainee] = {t.cef: t for t in trainees}
        self._id = max((t.trainee_id for t in trainees), default=0)

    def get_by_cef(self, cef: str) -> Optional[Trainee]:
        return self._by_cef.get(cef)

    def list_all(self, *, groupe=None):
        items = [t for t in self._by_cef.values() if groupe is None or t.groupe == groupe]
        return sorted(items, key=lambda t: t.name)

    def create(self, *, cef, name, first_name, groupe, phone=None) -> int:
        self._id += 1
        self._by_cef[cef] = Trainee(
            trainee_id=self._id, cef=cef, name=name, first_name=first_name, groupe=groupe, phone=phone
        )
        return self._id

    def update(self, trainee: Trainee) -> bool:
        current = next((t for t in self._by_cef.values() if t.trainee_id == trainee.trainee_id), None)
        if not current:
            return False
        del self._by_cef[current.cef]
        self._by_cef[trainee.cef] = trainee
        return True

    def delete(self, trainee_id: int) -> bool:
        for cef, t in list(self._by_cef.items()):
            if t.trainee_id == trainee_id:
                del self._by_cef[cef]
                return True
        return False


class InMemoryGroups:
    def __init__(self, groups=()):
        self._by_id: dict[int, Group] = {g.group_id: g for g in groups}

    def get_by_id(self, group_id):
        return self._by_id.get(group_id)

    def get_by_name(self, name):
        return next((g for g in self._by_id.values() if g.name == name), None)

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda g: g.name)

    def create(self, *, name, filiere=None, annee=None) -> int:
        group_id = max(self._by_id, default=0) + 1
        self._by_id[group_id] = Group(group_id=group_id, name=name, filiere=filiere, annee=annee)
        return group_id

    def update(self, group: Group) -> bool:
        if group.group_id not in self._by_id:
            return False
        self._by_id[group.group_id] = group
        return True

    def delete(self, group_id) -> bool:
        return self._by_id.pop(group_id, None) is not None


class InMemoryAbsences:
    def __init__(self, sessions=(), absences=()):
        self.sessions: dict[int, AbsenceSession] = {s.session_id: s for s in sessions}
        self.absences: dict[int, TraineeAbsence] = {a.absence_id: a for a in absences}

    def _joined(self, a: TraineeAbsence) -> TraineeAbsence:
        s = self.sessions.get(a.session_id)
        if not s:
            return a
        return dataclasses.replace(a, session_date=s.session_date, start_time=s.start_time, end_time=s.end_time)

    def _update(self, absence_id: int, **changes) -> bool:
        a = self.absences.get(absence_id)
        if not a:
            return False
        self.absences[absence_id] = dataclasses.replace(a, **changes)
        return True

    def get_by_id(self, absence_id):
        a = self.absences.get(absence_id)
        return self._joined(a) if a else None

    def get_session(self, session_id):
        return self.sessions.get(session_id)

    def list_for_trainee(self, trainee_id, limit):
        items = [self._joined(a) for a in self.absences.values() if a.trainee_id == trainee_id]
        items.sort(key=lambda a: (a.session_date or date.min, a.start_time or time.min), reverse=True)
        return items[:limit]

    def list_for_trainees(self, trainee_ids):
        return [self._joined(a) for a in self.absences.values() if a.trainee_id in set(trainee_ids)]

    def list_sessions(self, *, groupe, start_date, end_date):
        return [
            s
            for s in self.sessions.values()
            if s.groupe == groupe and start_date <= s.session_date <= end_date
        ]

    def list_for_sessions(self, session_ids):
        return [self._joined(a) for a in self.absences.values() if a.session_id in set(session_ids)]

    def set_validation(self, *, absence_id, is_validated, validated_by, validated_at, comment=None):
        return self._update(
            absence_id,
            is_validated=is_validated,
            validated_by=validated_by,
            validated_at=validated_at,
            validation_comment=comment,
        )

    def set_justification(self, *, absence_id, is_justified, has_billet_entree, absence_hours, comment=None):
        return self._update(
            absence_id,
            is_justified=is_justified,
            has_billet_entree=has_billet_entree,
            absence_hours=absence_hours,
            justification_comment=comment,
        )

    def set_billet_entree(self, *, absence_id, value):
        return self._update(absence_id, has_billet_entree=value)

    def update_status(self, *, absence_id, status, absence_hours):
        return self._update(absence_id, status=status, absence_hours=absence_hours)

    def validate_many(self, *, absence_ids, validated_by, validated_at):
        return sum(
            self._update(i, is_validated=True, validated_by=validated_by, validated_at=validated_at)
            for i in absence_ids
        )

    def validate_sessions(self, *, groupe, session_date):
        count = 0
        for sid, s in list(self.sessions.items()):
            if s.groupe == groupe and s.session_date == session_date:
                self.sessions[sid] = dataclasses.replace(s, is_validated=True)
                count += 1
        return count

    def create_session(self, *, groupe, session_date, start_time, end_time, teacher_id=None) -> int:
        session_id = max(self.sessions, default=0) + 1
        self.sessions[session_id] = AbsenceSession(
            session_id, groupe, session_date, start_time, end_time, teacher_id=teacher_id
        )
        return session_id

    def update_session(self, session: AbsenceSession) -> bool:
        if session.session_id not in self.sessions:
            return False
        self.sessions[session.session_id] = session
        return True

    def delete_session(self, session_id) -> bool:
        return self.sessions.pop(session_id, None) is not None

    def add_absence(self, *, trainee_id, session_id, status, absence_hours) -> int:
        absence_id = max(self.absences, default=0) + 1
        self.absences[absence_id] = TraineeAbsence(
            absence_id=absence_id,
            trainee_id=trainee_id,
            session_id=session_id,
            status=status,
            absence_hours=absence_hours,
        )
        return absence_id

    def delete_for_session(self, session_id) -> int:
        ids = [i for i, a in self.absences.items() if a.session_id == session_id]
        for i in ids:
            del self.absences[i]
        return len(ids)

    def delete_for_trainee(self, trainee_id) -> int:
        ids = [i for i, a in self.absences.items() if a.trainee_id == trainee_id]
        for i in ids:
            del self.absences[i]
        return len(ids)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 11, 26, 10, 0, 0)


@pytest.fixture
def trainees_repo() -> InMemoryTrainees:
    return InMemoryTrainees(
        [
            Trainee(trainee_id=1, cef="CEF001", name="Alaoui", first_name="Sara", groupe="DEV101"),
            Trainee(trainee_id=2, cef="CEF002", name="Bennani", first_name="Omar", groupe="DEV101"),
            Trainee(trainee_id=3, cef="CEF003", name="Chraibi", first_name="Nadia", groupe="DEV102"),
        ]
    )


@pytest.fixture
def absences_repo() -> InMemoryAbsences:
    # DEV101: Mon 24 and Tue 25 Nov 2025, Sun 30 Nov (skipped by weekly reports).
    sessions = [
        AbsenceSession(1, "DEV101", date(2025, 11, 24), time(8, 30), time(11, 0)),
        AbsenceSession(2, "DEV101", date(2025, 11, 25), time(8, 30), time(13, 30)),
        AbsenceSession(3, "DEV101", date(2025, 11, 30), time(8, 30), time(11, 0)),
    ]

    def absence(absence_id, trainee_id, session_id, status, hours=0.0, **kw):
        return TraineeAbsence(
            absence_id=absence_id,
            trainee_id=trainee_id,
            session_id=session_id,
            status=status,
            absence_hours=hours,
            **kw,
        )

    absences = [
        # Sara: 2.5h + 5h validated absences, one late, one unvalidated absence.
        absence(1, 1, 1, AbsenceStatus.ABSENT, 2.5, is_validated=True),
        absence(2, 1, 2, AbsenceStatus.ABSENT, 5.0, is_validated=True),
        absence(3, 1, 3, AbsenceStatus.LATE, 1.0, is_validated=True),
        absence(4, 1, 3, AbsenceStatus.ABSENT, 2.5, is_validated=False),
        # Omar: a justified absence and a late not yet validated.
        absence(5, 2, 1, AbsenceStatus.ABSENT, 2.5, is_validated=True, is_justified=True),
        absence(6, 2, 2, AbsenceStatus.LATE, 1.0),
    ]
    return InMemoryAbsences(sessions, absences)


@pytest.fixture
def groups_repo() -> InMemoryGroups:
    return InMemoryGroups(
        [
            Group(group_id=1, name="DEV101", filiere="Développement digital", annee="1A"),
            Group(group_id=2, name="DEV102", filiere="Développement digital", annee="1A"),
        ]
    )
