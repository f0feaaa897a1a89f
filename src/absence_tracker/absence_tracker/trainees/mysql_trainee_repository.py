from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Trainee
from .repository import TraineeRepository

_COLUMNS = "trainee_id, cef, name, first_name, groupe, phone"


def _to_trainee(r: Dict[str, Any]) -> Trainee:
    return Trainee(
        trainee_id=int(r["trainee_id"]),
        cef=r["cef"],
        name=r["name"],
        first_name=r["first_name"],
        groupe=r["groupe"],
        phone=r.get("phone"),
    )


class MySQLTraineeRepository(TraineeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_cef(self, cef: str) -> Optional[Trainee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM trainees WHERE cef=%s", (cef,))
            r = fetchone(cur)
            return _to_trainee(r) if r else None

    def list_all(self, *, groupe: Optional[str] = None) -> Sequence[Trainee]:
        with db_cursor(self._conn_factory) as (_, cur):
            if groupe:
                cur.execute(f"SELECT {_COLUMNS} FROM trainees WHERE groupe=%s ORDER BY name ASC", (groupe,))
            else:
                cur.execute(f"SELECT {_COLUMNS} FROM trainees ORDER BY groupe ASC, name ASC")
            return [_to_trainee(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        cef: str,
        name: str,
        first_name: str,
        groupe: str,
        phone: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO trainees(cef, name, first_name, groupe, phone)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (cef, name, first_name, groupe, phone),
            )
            return int(cur.lastrowid)

    def update(self, trainee: Trainee) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT trainee_id FROM trainees WHERE trainee_id=%s", (trainee.trainee_id,))
            if fetchone(cur) is None:
                return False
            cur.execute(
                """
                UPDATE trainees
                SET cef=%s, name=%s, first_name=%s, groupe=%s, phone=%s
                WHERE trainee_id=%s
                """,
                (trainee.cef, trainee.name, trainee.first_name, trainee.groupe, trainee.phone, trainee.trainee_id),
            )
            return True

    def delete(self, trainee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM trainees WHERE trainee_id=%s", (int(trainee_id),))
            return cur.rowcount > 0
