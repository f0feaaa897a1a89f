from __future__ import annotations

import dataclasses
import logging
from collections import defaultdict
from typing import Any, Iterable, Mapping, Optional

from ..absences.model import TraineeAbsence
from ..absences.repository import AbsenceRepository
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..groups.repository import GroupRepository
from ..scoring.calculator.base import NoteCalculator
from ..scoring.calculator.points_calculator import PointsNoteCalculator
from ..scoring.calculator.standard_calculator import StandardNoteCalculator
from ..scoring.engine import aggregate, tally_events
from .importer import read_trainee_sheet
from .model import Trainee, TraineeStatistics
from .repository import TraineeRepository

logger = logging.getLogger(__name__)


def _optional_text(value: Any) -> Optional[str]:
    return str(value or "").strip() or None


def _require_manager(role: Role) -> None:
    if role not in {Role.SG, Role.ADMIN}:
        raise AuthorizationError("Only a general supervisor or an admin can manage trainees")


def _history_item(a: TraineeAbsence) -> dict:
    return {
        "id": a.absence_id,
        "date": a.session_date.strftime("%Y-%m-%d") if a.session_date else None,
        "time": f"{a.start_time:%H:%M} - {a.end_time:%H:%M}" if a.start_time and a.end_time else None,
        "status": a.status.value,
        "source": "Justifié" if a.is_justified else "Non justifié",
    }


class TraineeService:
    """Trainee lookups enriched with scoring results.

    The list view and the detail view use different note formulas
    (``list_calculator`` / ``detail_calculator``); they are kept separate
    on purpose until a single formula is agreed on.
    """

    def __init__(
        self,
        trainees: TraineeRepository,
        absences: AbsenceRepository,
        *,
        groups: Optional[GroupRepository] = None,
        list_calculator: Optional[NoteCalculator] = None,
        detail_calculator: Optional[NoteCalculator] = None,
    ):
        self._trainees = trainees
        self._absences = absences
        self._groups = groups
        self._list_calculator = list_calculator or PointsNoteCalculator()
        self._detail_calculator = detail_calculator or StandardNoteCalculator()

    def _get(self, cef: str) -> Trainee:
        trainee = self._trainees.get_by_cef(str(cef).strip())
        if not trainee:
            raise NotFoundError("Trainee not found")
        return trainee

    def _summaries(self, groupe: Optional[str], calculator: NoteCalculator, *, with_absences: bool) -> list[dict]:
        trainees = list(self._trainees.list_all(groupe=groupe or None))
        by_trainee = defaultdict(list)
        for absence in self._absences.list_for_trainees([t.trainee_id for t in trainees]):
            by_trainee[absence.trainee_id].append(absence)

        out: list[dict] = []
        for t in trainees:
            rows = by_trainee.get(t.trainee_id, [])
            result = aggregate([a.to_event() for a in rows], calculator=calculator)
            item = t.to_dict()
            item.update(result.to_dict())
            if with_absences:
                item["absences"] = [a.to_dict() for a in rows]
            out.append(item)
        return out

    def list_trainees(self, *, groupe: Optional[str] = None) -> list[dict]:
        return self._summaries(groupe, self._detail_calculator, with_absences=False)

    def list_with_stats(self, *, groupe: Optional[str] = None) -> list[dict]:
        return self._summaries(groupe, self._list_calculator, with_absences=True)

    def get_statistics(self, cef: str) -> TraineeStatistics:
        trainee = self._get(cef)
        events = [a.to_event() for a in self._absences.list_for_trainees([trainee.trainee_id])]

        result = aggregate(events, calculator=self._detail_calculator)
        tally = tally_events(events)
        return TraineeStatistics(
            cef=trainee.cef,
            total_absence_hours=result.total_absence_hours,
            disciplinary_note=result.disciplinary_note,
            disciplinary_status=result.disciplinary_status.to_dict(),
            late_count=tally.late_count,
            absent_count=tally.absent_count,
            justified_count=tally.justified_count,
        )

    def get_absences(self, cef: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[dict]:
        trainee = self._get(cef)
        return [a.to_dict() for a in self._absences.list_for_trainee(trainee.trainee_id, int(limit))]

    def create_trainee(
        self,
        *,
        current_role: Role,
        cef: str,
        name: str,
        first_name: str,
        groupe: str,
        phone: Optional[str] = None,
    ) -> Trainee:
        _require_manager(current_role)

        cef = require_non_empty(cef, "cef")
        name = require_non_empty(name, "name")
        first_name = require_non_empty(first_name, "first_name")
        groupe = require_non_empty(groupe, "groupe")

        if self._trainees.get_by_cef(cef):
            raise ValidationError(f"A trainee with CEF {cef} already exists")

        trainee_id = self._trainees.create(
            cef=cef,
            name=name,
            first_name=first_name,
            groupe=groupe,
            phone=(phone or "").strip() or None,
        )
        return Trainee(
            trainee_id=trainee_id,
            cef=cef,
            name=name,
            first_name=first_name,
            groupe=groupe,
            phone=(phone or "").strip() or None,
        )

    def get_trainee(self, cef: str) -> dict:
        """Trainee detail: identity, scoring results, counts and history."""

        trainee = self._get(cef)
        events = [a.to_event() for a in self._absences.list_for_trainees([trainee.trainee_id])]
        result = aggregate(events, calculator=self._detail_calculator)
        tally = tally_events(events)
        history = self._absences.list_for_trainee(trainee.trainee_id, DEFAULT_HISTORY_LIMIT)

        return {
            **trainee.to_dict(),
            **result.to_dict(),
            "absence_stats": {
                "absent": tally.absent_count,
                "late": tally.late_count,
                "justified": tally.justified_count,
            },
            "absence_history": [_history_item(a) for a in history],
        }

    def update_trainee(
        self,
        *,
        current_role: Role,
        cef: str,
        new_cef: Optional[str] = None,
        name: Optional[str] = None,
        first_name: Optional[str] = None,
        groupe: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Trainee:
        """Blank fields keep their current value; ``phone=""`` clears it."""

        _require_manager(current_role)
        trainee = self._get(cef)

        target_cef = _optional_text(new_cef) or trainee.cef
        if target_cef != trainee.cef and self._trainees.get_by_cef(target_cef):
            raise ValidationError(f"A trainee with CEF {target_cef} already exists")

        updated = dataclasses.replace(
            trainee,
            cef=target_cef,
            name=_optional_text(name) or trainee.name,
            first_name=_optional_text(first_name) or trainee.first_name,
            groupe=_optional_text(groupe) or trainee.groupe,
            phone=trainee.phone if phone is None else _optional_text(phone),
        )
        self._trainees.update(updated)
        return updated

    def delete_trainee(self, *, current_role: Role, cef: str) -> None:
        _require_manager(current_role)
        trainee = self._get(cef)
        removed = self._absences.delete_for_trainee(trainee.trainee_id)
        self._trainees.delete(trainee.trainee_id)
        logger.info("trainee %s deleted with %s absence rows", trainee.cef, removed)

    def _ensure_group(self, name: str) -> None:
        if self._groups is not None and not self._groups.get_by_name(name):
            self._groups.create(name=name)

    def bulk_import(self, *, current_role: Role, rows: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
        """Create or update trainees by CEF; bad rows are reported, not raised.

        Missing groups are created on the way.
        """

        _require_manager(current_role)

        imported = 0
        errors: list[dict] = []
        for raw in rows:
            if not isinstance(raw, Mapping):
                errors.append({"cef": "Unknown", "error": "Invalid row"})
                continue
            try:
                cef = require_non_empty(raw.get("cef"), "cef")
                name = require_non_empty(raw.get("name"), "name")
                first_name = require_non_empty(raw.get("first_name"), "first_name")
                groupe = require_non_empty(raw.get("groupe"), "groupe")
            except ValidationError as e:
                errors.append({"cef": _optional_text(raw.get("cef")) or "Unknown", "error": str(e)})
                continue
            phone = _optional_text(raw.get("phone"))

            self._ensure_group(groupe)
            existing = self._trainees.get_by_cef(cef)
            if existing:
                self._trainees.update(
                    dataclasses.replace(
                        existing,
                        name=name,
                        first_name=first_name,
                        groupe=groupe,
                        phone=phone or existing.phone,
                    )
                )
            else:
                self._trainees.create(cef=cef, name=name, first_name=first_name, groupe=groupe, phone=phone)
            imported += 1

        logger.info("trainee import: %s saved, %s rejected", imported, len(errors))
        return {"imported": imported, "errors": errors}

    def import_trainees_xlsx(self, *, current_role: Role, content: bytes) -> dict[str, Any]:
        _require_manager(current_role)
        rows, sheet_errors = read_trainee_sheet(content)
        result = self.bulk_import(current_role=current_role, rows=rows)
        return {"imported": result["imported"], "errors": sheet_errors + result["errors"]}
