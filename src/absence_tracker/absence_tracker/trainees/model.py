from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Trainee:
    """Domain entity: a trainee, identified publicly by CEF."""

    trainee_id: int
    cef: str
    name: str
    first_name: str
    groupe: str
    phone: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.trainee_id,
            "cef": self.cef,
            "name": self.name,
            "first_name": self.first_name,
            "groupe": self.groupe,
            "phone": self.phone,
        }


@dataclass(frozen=True)
class TraineeStatistics:
    """Read-model for the trainee detail view."""

    cef: str
    total_absence_hours: float
    disciplinary_note: float
    disciplinary_status: dict
    late_count: int
    absent_count: int
    justified_count: int

    def to_dict(self) -> dict:
        return {
            "cef": self.cef,
            "total_absence_hours": self.total_absence_hours,
            "disciplinary_note": self.disciplinary_note,
            "disciplinary_status": self.disciplinary_status,
            "late_count": self.late_count,
            "absent_count": self.absent_count,
            "justified_count": self.justified_count,
        }
