from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Protocol, Sequence

from ..core.enums import AbsenceStatus
from .model import AbsenceSession, TraineeAbsence


class AbsenceRepository(Protocol):
    def get_by_id(self, absence_id: int) -> Optional[TraineeAbsence]:
        raise NotImplementedError

    def get_session(self, session_id: int) -> Optional[AbsenceSession]:
        raise NotImplementedError

    def list_for_trainee(self, trainee_id: int, limit: int) -> Sequence[TraineeAbsence]:
        """Newest session first."""

        raise NotImplementedError

    def list_for_trainees(self, trainee_ids: Sequence[int]) -> Sequence[TraineeAbsence]:
        raise NotImplementedError

    def list_sessions(self, *, groupe: str, start_date: date, end_date: date) -> Sequence[AbsenceSession]:
        raise NotImplementedError

    def list_for_sessions(self, session_ids: Sequence[int]) -> Sequence[TraineeAbsence]:
        raise NotImplementedError

    def set_validation(
        self,
        *,
        absence_id: int,
        is_validated: bool,
        validated_by: Optional[int],
        validated_at: datetime,
        comment: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def set_justification(
        self,
        *,
        absence_id: int,
        is_justified: bool,
        has_billet_entree: bool,
        absence_hours: float,
        comment: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def set_billet_entree(self, *, absence_id: int, value: bool) -> bool:
        raise NotImplementedError

    def update_status(self, *, absence_id: int, status: AbsenceStatus, absence_hours: float) -> bool:
        raise NotImplementedError

    def validate_many(self, *, absence_ids: Sequence[int], validated_by: Optional[int], validated_at: datetime) -> int:
        raise NotImplementedError

    def validate_sessions(self, *, groupe: str, session_date: date) -> int:
        """Mark every session of the group on that day validated."""

        raise NotImplementedError

    def create_session(
        self,
        *,
        groupe: str,
        session_date: date,
        start_time: time,
        end_time: time,
        teacher_id: Optional[int] = None,
    ) -> int:
        raise NotImplementedError

    def update_session(self, session: AbsenceSession) -> bool:
        raise NotImplementedError

    def delete_session(self, session_id: int) -> bool:
        raise NotImplementedError

    def add_absence(self, *, trainee_id: int, session_id: int, status: AbsenceStatus, absence_hours: float) -> int:
        """Insert a roll-call row; it starts unvalidated and unjustified."""

        raise NotImplementedError

    def delete_for_session(self, session_id: int) -> int:
        raise NotImplementedError

    def delete_for_trainee(self, trainee_id: int) -> int:
        raise NotImplementedError
