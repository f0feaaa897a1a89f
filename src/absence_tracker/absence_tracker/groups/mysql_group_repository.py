from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Group
from .repository import GroupRepository

_COLUMNS = "group_id, name, filiere, annee"


def _to_group(r: Dict[str, Any]) -> Group:
    return Group(group_id=int(r["group_id"]), name=r["name"], filiere=r.get("filiere"), annee=r.get("annee"))


class MySQLGroupRepository(GroupRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, group_id: int) -> Optional[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM class_groups WHERE group_id=%s", (int(group_id),))
            r = fetchone(cur)
            return _to_group(r) if r else None

    def get_by_name(self, name: str) -> Optional[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM class_groups WHERE name=%s", (name,))
            r = fetchone(cur)
            return _to_group(r) if r else None

    def list_all(self) -> Sequence[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM class_groups ORDER BY name ASC")
            return [_to_group(r) for r in fetchall(cur)]

    def create(self, *, name: str, filiere: Optional[str] = None, annee: Optional[str] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO class_groups(name, filiere, annee) VALUES(%s,%s,%s)",
                (name, filiere, annee),
            )
            return int(cur.lastrowid)

    def update(self, group: Group) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT group_id FROM class_groups WHERE group_id=%s", (group.group_id,))
            if fetchone(cur) is None:
                return False
            cur.execute(
                "UPDATE class_groups SET name=%s, filiere=%s, annee=%s WHERE group_id=%s",
                (group.name, group.filiere, group.annee, group.group_id),
            )
            return True

    def delete(self, group_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM class_groups WHERE group_id=%s", (int(group_id),))
            return cur.rowcount > 0
