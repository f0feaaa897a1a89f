from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, time
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_local, parse_hhmm
from ..common.validators import coerce_flag, require_non_empty
from ..core.constants import LATE_EVENT_HOURS
from ..core.enums import AbsenceStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..scoring.engine import round1
from .model import AbsenceSession, TraineeAbsence
from .repository import AbsenceRepository

logger = logging.getLogger(__name__)

SUPERVISOR_ROLES = {Role.SG, Role.ADMIN}
ROLL_CALL_ROLES = {Role.TEACHER, Role.SG, Role.ADMIN}

# Marks an optional field the caller did not send (None is a valid value).
UNCHANGED = object()

_JUSTIFIED_COLUMNS = {"is_justified", "isJustified"}
_BILLET_COLUMNS = {"has_billet_entree", "hasBilletEntree"}


def session_hours(start: str | time, end: str | time) -> float:
    """Length of a HH:MM range in hours, one decimal; reversed ranges give 0."""

    s = parse_hhmm(start)
    e = parse_hhmm(end)
    minutes = (e.hour * 60 + e.minute) - (s.hour * 60 + s.minute)
    return round1(max(minutes, 0) / 60)


def hours_for_status(status: AbsenceStatus, session: Optional[AbsenceSession]) -> float:
    """Hours stored on a trainee absence for its status."""

    if status == AbsenceStatus.PRESENT:
        return 0.0
    if status == AbsenceStatus.LATE:
        return float(LATE_EVENT_HOURS)
    if not session:
        return 0.0
    return session_hours(session.start_time, session.end_time)


def _require_supervisor(role: Role) -> None:
    if role not in SUPERVISOR_ROLES:
        raise AuthorizationError("Only a general supervisor or an admin can do this")


def _parse_status(raw: Any) -> AbsenceStatus:
    try:
        return AbsenceStatus(str(getattr(raw, "value", raw)).strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid status: {raw!r}")


def _parse_range(start: str | time, end: str | time) -> tuple[time, time]:
    s = parse_hhmm(start)
    e = parse_hhmm(end)
    if e <= s:
        raise ValidationError("end_time must be after start_time")
    return s, e


def _parse_students(students: Optional[Iterable[Mapping[str, Any]]]) -> list[tuple[int, AbsenceStatus]]:
    """Roll-call entries as (trainee_id, status); a missing status means present."""

    entries = []
    for student in students or ():
        if not isinstance(student, Mapping):
            raise ValidationError("Each student needs a trainee_id and a status")
        try:
            trainee_id = int(student.get("trainee_id"))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid trainee_id: {student.get('trainee_id')!r}")
        entries.append((trainee_id, _parse_status(student.get("status") or AbsenceStatus.PRESENT)))
    return entries


class AbsenceService:
    def __init__(self, absences: AbsenceRepository, *, clock: Callable[[], datetime] = now_local):
        self._absences = absences
        self._clock = clock

    def _get(self, absence_id: int) -> TraineeAbsence:
        absence = self._absences.get_by_id(int(absence_id))
        if not absence:
            raise NotFoundError("Trainee absence not found")
        return absence

    def validate_absences(
        self,
        *,
        current_role: Role,
        absence_ids: Sequence[int],
        is_validated: bool = True,
        comment: Optional[str] = None,
        validated_by: Optional[int] = None,
    ) -> dict[str, Any]:
        _require_supervisor(current_role)

        now = self._clock()
        count = 0
        errors: list[dict] = []
        for absence_id in absence_ids:
            ok = self._absences.set_validation(
                absence_id=int(absence_id),
                is_validated=bool(is_validated),
                validated_by=validated_by,
                validated_at=now,
                comment=comment or None,
            )
            if ok:
                count += 1
            else:
                errors.append({"id": absence_id, "error": "Trainee absence not found"})

        logger.info("validated %s/%s trainee absences", count, len(absence_ids))
        return {"validated_count": count, "errors": errors}

    def justify_absences(
        self,
        *,
        current_role: Role,
        absence_ids: Sequence[int],
        justified: bool,
        comment: Optional[str] = None,
        has_billet_entree: bool = False,
    ) -> dict[str, Any]:
        _require_supervisor(current_role)

        count = 0
        errors: list[dict] = []
        for absence_id in absence_ids:
            absence = self._absences.get_by_id(int(absence_id))
            if not absence:
                errors.append({"id": absence_id, "error": "Trainee absence not found"})
                continue

            # Justified absences carry no chargeable hours.
            hours = 0.0 if justified else absence.absence_hours
            self._absences.set_justification(
                absence_id=absence.absence_id,
                is_justified=bool(justified),
                has_billet_entree=bool(has_billet_entree),
                absence_hours=hours,
                comment=comment or None,
            )
            count += 1

        logger.info("justification updated on %s/%s trainee absences", count, len(absence_ids))
        return {"justified_count": count, "errors": errors}

    def mark_billet_entree(self, *, current_role: Role, absence_id: int) -> TraineeAbsence:
        _require_supervisor(current_role)
        absence = self._get(absence_id)
        self._absences.set_billet_entree(absence_id=absence.absence_id, value=True)
        return self._get(absence.absence_id)

    def update_status(self, *, current_role: Role, absence_id: int, status: str) -> TraineeAbsence:
        _require_supervisor(current_role)
        new_status = _parse_status(status)

        absence = self._get(absence_id)
        session = self._absences.get_session(absence.session_id)
        self._absences.update_status(
            absence_id=absence.absence_id,
            status=new_status,
            absence_hours=hours_for_status(new_status, session),
        )
        return self._get(absence.absence_id)

    def update_column(self, *, current_role: Role, absence_id: int, column: str, value: Any) -> TraineeAbsence:
        _require_supervisor(current_role)
        absence = self._get(absence_id)
        flag = coerce_flag(value)

        if column in _JUSTIFIED_COLUMNS:
            self._absences.set_justification(
                absence_id=absence.absence_id,
                is_justified=flag,
                has_billet_entree=absence.has_billet_entree,
                absence_hours=0.0 if flag else absence.absence_hours,
                comment=absence.justification_comment,
            )
        elif column in _BILLET_COLUMNS:
            self._absences.set_billet_entree(absence_id=absence.absence_id, value=flag)
        else:
            raise ValidationError(f"Column cannot be updated: {column!r}")

        return self._get(absence.absence_id)

    def validate_displayed(
        self,
        *,
        current_role: Role,
        groupe: str,
        session_date: date,
        absence_ids: Sequence[int],
        validated_by: Optional[int] = None,
    ) -> dict[str, Any]:
        _require_supervisor(current_role)
        if not groupe or not str(groupe).strip():
            raise ValidationError("group is required")

        count = self._absences.validate_many(
            absence_ids=[int(i) for i in absence_ids],
            validated_by=validated_by,
            validated_at=self._clock(),
        )
        self._absences.validate_sessions(groupe=str(groupe).strip(), session_date=session_date)

        logger.info("validated %s displayed absences for %s on %s", count, groupe, session_date)
        return {
            "validatedCount": count,
            "group": groupe,
            "date": session_date.strftime("%Y-%m-%d"),
        }

    # Roll call

    def _get_session(self, session_id: int) -> AbsenceSession:
        session = self._absences.get_session(int(session_id))
        if not session:
            raise NotFoundError("Absence record not found")
        return session

    def _add_students(
        self, session: AbsenceSession, entries: Sequence[tuple[int, AbsenceStatus]]
    ) -> list[TraineeAbsence]:
        created = []
        for trainee_id, status in entries:
            absence_id = self._absences.add_absence(
                trainee_id=trainee_id,
                session_id=session.session_id,
                status=status,
                absence_hours=hours_for_status(status, session),
            )
            created.append(self._get(absence_id))
        return created

    def session_detail(self, session_id: int) -> dict[str, Any]:
        session = self._get_session(session_id)
        rows = self._absences.list_for_sessions([session.session_id])
        return {**session.to_dict(), "trainee_absences": [a.to_dict() for a in rows]}

    def record_session(
        self,
        *,
        current_role: Role,
        groupe: str,
        session_date: date,
        start_time: str | time,
        end_time: str | time,
        students: Iterable[Mapping[str, Any]],
        teacher_id: Optional[int] = None,
    ) -> dict[str, Any]:
        """Store one roll call: the session and each trainee's status.

        Stored hours come from the status and the session length. Rows start
        unvalidated and unjustified.
        """

        if current_role not in ROLL_CALL_ROLES:
            raise AuthorizationError("You cannot record attendance")
        groupe = require_non_empty(groupe, "group")
        start, end = _parse_range(start_time, end_time)
        entries = _parse_students(students)

        session_id = self._absences.create_session(
            groupe=groupe,
            session_date=session_date,
            start_time=start,
            end_time=end,
            teacher_id=teacher_id,
        )
        session = self._get_session(session_id)
        created = self._add_students(session, entries)

        logger.info("roll call %s recorded for %s on %s (%s trainees)", session_id, groupe, session_date, len(created))
        return {**session.to_dict(), "trainee_absences": [a.to_dict() for a in created]}

    def update_session(
        self,
        *,
        current_role: Role,
        session_id: int,
        groupe: Optional[str] = None,
        session_date: Optional[date] = None,
        start_time: Optional[str | time] = None,
        end_time: Optional[str | time] = None,
        teacher_id: Any = UNCHANGED,
        is_validated: Optional[bool] = None,
        students: Optional[Iterable[Mapping[str, Any]]] = None,
    ) -> dict[str, Any]:
        """Edit a roll call.

        A new ``students`` list replaces every trainee row of the session.
        Otherwise a new time range recomputes the stored hours of the
        existing rows.
        """

        _require_supervisor(current_role)
        current = self._get_session(session_id)
        entries = None if students is None else _parse_students(students)

        start, end = _parse_range(
            start_time if start_time else current.start_time,
            end_time if end_time else current.end_time,
        )
        updated = dataclasses.replace(
            current,
            groupe=str(groupe).strip() if groupe and str(groupe).strip() else current.groupe,
            session_date=session_date or current.session_date,
            start_time=start,
            end_time=end,
            teacher_id=current.teacher_id if teacher_id is UNCHANGED else teacher_id,
            is_validated=current.is_validated if is_validated is None else bool(is_validated),
        )
        self._absences.update_session(updated)

        if entries is not None:
            self._absences.delete_for_session(updated.session_id)
            self._add_students(updated, entries)
        elif (start, end) != (current.start_time, current.end_time):
            for a in self._absences.list_for_sessions([updated.session_id]):
                self._absences.update_status(
                    absence_id=a.absence_id,
                    status=a.status,
                    absence_hours=hours_for_status(a.status, updated),
                )

        return self.session_detail(updated.session_id)

    def delete_session(self, *, current_role: Role, session_id: int) -> None:
        _require_supervisor(current_role)
        session = self._get_session(session_id)
        removed = self._absences.delete_for_session(session.session_id)
        self._absences.delete_session(session.session_id)
        logger.info("roll call %s deleted with %s trainee rows", session.session_id, removed)
