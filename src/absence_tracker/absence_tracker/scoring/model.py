from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from ..common.validators import coerce_flag, coerce_hours
from ..core.enums import AbsenceStatus


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


@dataclass(frozen=True)
class AttendanceEvent:
    """One attendance outcome as seen by the scoring engine.

    Only validated events count. ``is_justified`` and ``absence_hours`` only
    matter for absent events.
    """

    status: Union[AbsenceStatus, str]
    is_validated: bool = False
    is_justified: bool = False
    absence_hours: float = 0.0

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "AttendanceEvent":
        """Build an event from an API/DB row, camelCase or snake_case keys."""

        status_raw = _pick(raw, "status")
        status_text = str(getattr(status_raw, "value", status_raw))
        try:
            status: Union[AbsenceStatus, str] = AbsenceStatus(status_text.strip().lower())
        except ValueError:
            status = "" if status_raw is None else str(status_raw)

        return cls(
            status=status,
            is_validated=coerce_flag(_pick(raw, "isValidated", "is_validated")),
            is_justified=coerce_flag(_pick(raw, "isJustified", "is_justified")),
            absence_hours=coerce_hours(_pick(raw, "absenceHours", "absence_hours")),
        )


EventLike = Union[AttendanceEvent, Mapping[str, Any]]


def as_event(item: EventLike) -> AttendanceEvent:
    if isinstance(item, AttendanceEvent):
        return item
    return AttendanceEvent.from_mapping(item)


@dataclass(frozen=True)
class DisciplinaryStatus:
    text: str
    color: str

    def to_dict(self) -> dict:
        return {"text": self.text, "color": self.color}


@dataclass(frozen=True)
class AggregateResult:
    """Engine output, recomputed on every call."""

    total_absence_hours: float
    disciplinary_status: DisciplinaryStatus
    disciplinary_note: float

    def to_dict(self) -> dict:
        return {
            "totalAbsenceHours": self.total_absence_hours,
            "disciplinaryStatus": self.disciplinary_status.to_dict(),
            "disciplinaryNote": self.disciplinary_note,
        }
