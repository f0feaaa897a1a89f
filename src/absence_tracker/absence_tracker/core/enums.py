from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used for access checks."""

    ADMIN = "admin"
    SG = "sg"
    TEACHER = "teacher"


class AbsenceStatus(str, Enum):
    """Attendance outcome recorded for a trainee in one session."""

    ABSENT = "absent"
    LATE = "late"
    PRESENT = "present"


class NoteFormula(str, Enum):
    """Which disciplinary note formula a surface uses."""

    STANDARD = "standard"
    POINTS = "points"
