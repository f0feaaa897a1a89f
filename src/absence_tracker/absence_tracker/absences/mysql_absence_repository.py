from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AbsenceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import AbsenceSession, TraineeAbsence
from .repository import AbsenceRepository

_SELECT_ABSENCE = """
    SELECT
        ta.absence_id, ta.trainee_id, ta.session_id, ta.status,
        ta.is_validated, ta.is_justified, ta.has_billet_entree, ta.absence_hours,
        ta.validated_by, ta.validated_at, ta.justification_comment, ta.validation_comment,
        ta.created_at,
        s.session_date, s.start_time, s.end_time
    FROM trainee_absences ta
    LEFT JOIN absence_sessions s ON s.session_id = ta.session_id
"""


def _to_absence(r: Dict[str, Any]) -> TraineeAbsence:
    return TraineeAbsence(
        absence_id=int(r["absence_id"]),
        trainee_id=int(r["trainee_id"]),
        session_id=int(r["session_id"]),
        status=AbsenceStatus(r["status"]),
        is_validated=bool(r.get("is_validated")),
        is_justified=bool(r.get("is_justified")),
        has_billet_entree=bool(r.get("has_billet_entree")),
        absence_hours=float(r.get("absence_hours") or 0),
        validated_by=r.get("validated_by"),
        validated_at=r.get("validated_at"),
        justification_comment=r.get("justification_comment"),
        validation_comment=r.get("validation_comment"),
        session_date=r.get("session_date"),
        start_time=normalize_mysql_time(r.get("start_time")),
        end_time=normalize_mysql_time(r.get("end_time")),
        created_at=r.get("created_at"),
    )


def _to_session(r: Dict[str, Any]) -> AbsenceSession:
    return AbsenceSession(
        session_id=int(r["session_id"]),
        groupe=r["groupe"],
        session_date=r["session_date"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        is_validated=bool(r.get("is_validated")),
        teacher_id=r.get("teacher_id"),
    )


def _placeholders(values: Sequence[Any]) -> str:
    return ",".join(["%s"] * len(values))


def _absence_exists(cur, absence_id: int) -> bool:
    # Affected-row counts are 0 when an UPDATE changes nothing, so look the row up.
    cur.execute("SELECT absence_id FROM trainee_absences WHERE absence_id=%s", (int(absence_id),))
    return fetchone(cur) is not None


class MySQLAbsenceRepository(AbsenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, absence_id: int) -> Optional[TraineeAbsence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_ABSENCE + " WHERE ta.absence_id=%s", (int(absence_id),))
            r = fetchone(cur)
            return _to_absence(r) if r else None

    def get_session(self, session_id: int) -> Optional[AbsenceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT session_id, groupe, session_date, start_time, end_time, is_validated, teacher_id
                FROM absence_sessions
                WHERE session_id=%s
                """,
                (int(session_id),),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def list_for_trainee(self, trainee_id: int, limit: int) -> Sequence[TraineeAbsence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_ABSENCE
                + """
                WHERE ta.trainee_id=%s
                ORDER BY s.session_date DESC, s.start_time DESC, ta.absence_id DESC
                LIMIT %s
                """,
                (int(trainee_id), int(limit)),
            )
            return [_to_absence(r) for r in fetchall(cur)]

    def list_for_trainees(self, trainee_ids: Sequence[int]) -> Sequence[TraineeAbsence]:
        if not trainee_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_ABSENCE + f" WHERE ta.trainee_id IN ({_placeholders(trainee_ids)})",
                tuple(int(i) for i in trainee_ids),
            )
            return [_to_absence(r) for r in fetchall(cur)]

    def list_sessions(self, *, groupe: str, start_date: date, end_date: date) -> Sequence[AbsenceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT session_id, groupe, session_date, start_time, end_time, is_validated, teacher_id
                FROM absence_sessions
                WHERE groupe=%s AND session_date BETWEEN %s AND %s
                ORDER BY session_date ASC, start_time ASC
                """,
                (groupe, start_date, end_date),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_for_sessions(self, session_ids: Sequence[int]) -> Sequence[TraineeAbsence]:
        if not session_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT_ABSENCE + f" WHERE ta.session_id IN ({_placeholders(session_ids)})",
                tuple(int(i) for i in session_ids),
            )
            return [_to_absence(r) for r in fetchall(cur)]

    def set_validation(
        self,
        *,
        absence_id: int,
        is_validated: bool,
        validated_by: Optional[int],
        validated_at: datetime,
        comment: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if not _absence_exists(cur, absence_id):
                return False
            cur.execute(
                """
                UPDATE trainee_absences
                SET is_validated=%s, validated_by=%s, validated_at=%s, validation_comment=%s
                WHERE absence_id=%s
                """,
                (int(bool(is_validated)), validated_by, validated_at, comment, int(absence_id)),
            )
            return True

    def set_justification(
        self,
        *,
        absence_id: int,
        is_justified: bool,
        has_billet_entree: bool,
        absence_hours: float,
        comment: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if not _absence_exists(cur, absence_id):
                return False
            cur.execute(
                """
                UPDATE trainee_absences
                SET is_justified=%s, has_billet_entree=%s, absence_hours=%s, justification_comment=%s
                WHERE absence_id=%s
                """,
                (int(bool(is_justified)), int(bool(has_billet_entree)), absence_hours, comment, int(absence_id)),
            )
            return True

    def set_billet_entree(self, *, absence_id: int, value: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if not _absence_exists(cur, absence_id):
                return False
            cur.execute(
                "UPDATE trainee_absences SET has_billet_entree=%s WHERE absence_id=%s",
                (int(bool(value)), int(absence_id)),
            )
            return True

    def update_status(self, *, absence_id: int, status: AbsenceStatus, absence_hours: float) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if not _absence_exists(cur, absence_id):
                return False
            cur.execute(
                "UPDATE trainee_absences SET status=%s, absence_hours=%s WHERE absence_id=%s",
                (status.value, absence_hours, int(absence_id)),
            )
            return True

    def validate_many(self, *, absence_ids: Sequence[int], validated_by: Optional[int], validated_at: datetime) -> int:
        if not absence_ids:
            return 0
        ids = tuple(int(i) for i in absence_ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT COUNT(*) AS found FROM trainee_absences WHERE absence_id IN ({_placeholders(ids)})",
                ids,
            )
            found = int((fetchone(cur) or {}).get("found") or 0)
            cur.execute(
                f"""
                UPDATE trainee_absences
                SET is_validated=1, validated_by=%s, validated_at=%s
                WHERE absence_id IN ({_placeholders(ids)})
                """,
                (validated_by, validated_at, *ids),
            )
            return found

    def validate_sessions(self, *, groupe: str, session_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE absence_sessions SET is_validated=1 WHERE groupe=%s AND session_date=%s",
                (groupe, session_date),
            )
            return int(cur.rowcount)

    def create_session(
        self,
        *,
        groupe: str,
        session_date: date,
        start_time: time,
        end_time: time,
        teacher_id: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO absence_sessions(groupe, session_date, start_time, end_time, teacher_id, is_validated)
                VALUES(%s,%s,%s,%s,%s,0)
                """,
                (groupe, session_date, start_time, end_time, teacher_id),
            )
            return int(cur.lastrowid)

    def update_session(self, session: AbsenceSession) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT session_id FROM absence_sessions WHERE session_id=%s", (session.session_id,))
            if fetchone(cur) is None:
                return False
            cur.execute(
                """
                UPDATE absence_sessions
                SET groupe=%s, session_date=%s, start_time=%s, end_time=%s, teacher_id=%s, is_validated=%s
                WHERE session_id=%s
                """,
                (
                    session.groupe,
                    session.session_date,
                    session.start_time,
                    session.end_time,
                    session.teacher_id,
                    int(bool(session.is_validated)),
                    session.session_id,
                ),
            )
            return True

    def delete_session(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM absence_sessions WHERE session_id=%s", (int(session_id),))
            return cur.rowcount > 0

    def add_absence(self, *, trainee_id: int, session_id: int, status: AbsenceStatus, absence_hours: float) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO trainee_absences(trainee_id, session_id, status, absence_hours)
                VALUES(%s,%s,%s,%s)
                """,
                (int(trainee_id), int(session_id), status.value, absence_hours),
            )
            return int(cur.lastrowid)

    def delete_for_session(self, session_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM trainee_absences WHERE session_id=%s", (int(session_id),))
            return int(cur.rowcount)

    def delete_for_trainee(self, trainee_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM trainee_absences WHERE trainee_id=%s", (int(trainee_id),))
            return int(cur.rowcount)
