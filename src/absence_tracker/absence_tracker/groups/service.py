from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Optional

from ..absences.repository import AbsenceRepository
from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..trainees.model import Trainee
from ..trainees.repository import TraineeRepository
from .model import Group
from .repository import GroupRepository


def _optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


class GroupService:
    def __init__(self, groups: GroupRepository, trainees: TraineeRepository, absences: AbsenceRepository):
        self._groups = groups
        self._trainees = trainees
        self._absences = absences

    @staticmethod
    def _require_manager(role: Role) -> None:
        if role not in {Role.SG, Role.ADMIN}:
            raise AuthorizationError("Only a general supervisor or an admin can manage groups")

    def _get(self, group_id: int) -> Group:
        group = self._groups.get_by_id(int(group_id))
        if not group:
            raise NotFoundError("Group not found")
        return group

    def _get_by_name(self, name: str) -> Group:
        group = self._groups.get_by_name(str(name).strip())
        if not group:
            raise NotFoundError("Group not found")
        return group

    def list_groups(self) -> list[Group]:
        return list(self._groups.list_all())

    def get_group(self, group_id: int) -> Group:
        return self._get(group_id)

    def create_group(
        self,
        *,
        current_role: Role,
        name: str,
        filiere: Optional[str] = None,
        annee: Optional[str] = None,
    ) -> Group:
        self._require_manager(current_role)
        name = require_non_empty(name, "name")
        if self._groups.get_by_name(name):
            raise ValidationError(f"Group {name} already exists")

        group_id = self._groups.create(name=name, filiere=_optional_text(filiere), annee=_optional_text(annee))
        return self._get(group_id)

    def update_group(
        self,
        *,
        current_role: Role,
        group_id: int,
        name: Optional[str] = None,
        filiere: Optional[str] = None,
        annee: Optional[str] = None,
    ) -> Group:
        """Fields left as None keep their value; a blank name is ignored."""

        self._require_manager(current_role)
        group = self._get(group_id)

        new_name = (name or "").strip() or group.name
        if new_name != group.name and self._groups.get_by_name(new_name):
            raise ValidationError(f"Group {new_name} already exists")

        updated = Group(
            group_id=group.group_id,
            name=new_name,
            filiere=group.filiere if filiere is None else _optional_text(filiere),
            annee=group.annee if annee is None else _optional_text(annee),
        )
        self._groups.update(updated)
        return updated

    def delete_group(self, *, current_role: Role, group_id: int) -> None:
        self._require_manager(current_role)
        group = self._get(group_id)
        self._groups.delete(group.group_id)

    def group_trainees(self, name: str) -> list[Trainee]:
        group = self._get_by_name(name)
        return list(self._trainees.list_all(groupe=group.name))

    def group_absences(
        self,
        name: str,
        *,
        on: Optional[date] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[dict]:
        """Roll calls of a group, newest first, each with its trainee rows.

        ``on`` selects one day; ``start``/``end`` apply only when both are set.
        """

        group = self._get_by_name(name)
        if on is not None:
            start = end = on
        elif start is None or end is None:
            start, end = date.min, date.max

        sessions = sorted(
            self._absences.list_sessions(groupe=group.name, start_date=start, end_date=end),
            key=lambda s: (s.session_date, s.start_time),
            reverse=True,
        )
        trainees = {t.trainee_id: t for t in self._trainees.list_all(groupe=group.name)}

        rows_by_session = defaultdict(list)
        for a in self._absences.list_for_sessions([s.session_id for s in sessions]):
            item = a.to_dict()
            trainee = trainees.get(a.trainee_id)
            item["trainee"] = trainee.to_dict() if trainee else None
            rows_by_session[a.session_id].append(item)

        return [{**s.to_dict(), "trainee_absences": rows_by_session.get(s.session_id, [])} for s in sessions]
