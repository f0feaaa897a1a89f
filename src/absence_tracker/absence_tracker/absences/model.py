from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import AbsenceStatus
from ..scoring.model import AttendanceEvent


@dataclass(frozen=True)
class AbsenceSession:
    """One class session in which a teacher took attendance for a group."""

    session_id: int
    groupe: str
    session_date: date
    start_time: time
    end_time: time
    is_validated: bool = False
    teacher_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.session_id,
            "group": self.groupe,
            "date": self.session_date.strftime("%Y-%m-%d"),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "teacher_id": self.teacher_id,
            "is_validated": self.is_validated,
        }


@dataclass(frozen=True)
class TraineeAbsence:
    """Domain entity: one trainee's outcome for one session.

    ``session_date``/``start_time``/``end_time`` are joined from the session
    for display and may be missing.
    """

    absence_id: int
    trainee_id: int
    session_id: int
    status: AbsenceStatus
    is_validated: bool = False
    is_justified: bool = False
    has_billet_entree: bool = False
    absence_hours: float = 0.0
    validated_by: Optional[int] = None
    validated_at: Optional[datetime] = None
    justification_comment: Optional[str] = None
    validation_comment: Optional[str] = None
    session_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    created_at: Optional[datetime] = None

    def to_event(self) -> AttendanceEvent:
        return AttendanceEvent(
            status=self.status,
            is_validated=self.is_validated,
            is_justified=self.is_justified,
            absence_hours=self.absence_hours,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.absence_id,
            "trainee_id": self.trainee_id,
            "session_id": self.session_id,
            "status": self.status.value,
            "is_validated": self.is_validated,
            "is_justified": self.is_justified,
            "has_billet_entree": self.has_billet_entree,
            "absence_hours": self.absence_hours,
            "date": self.session_date.strftime("%Y-%m-%d") if self.session_date else None,
            "start_time": self.start_time.strftime("%H:%M") if self.start_time else None,
            "end_time": self.end_time.strftime("%H:%M") if self.end_time else None,
            "justification_comment": self.justification_comment,
            "validation_comment": self.validation_comment,
        }
