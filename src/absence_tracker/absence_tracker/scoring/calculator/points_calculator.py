from __future__ import annotations

from ..engine import calculate_points_note
from .base import NoteCalculator


class PointsNoteCalculator(NoteCalculator):
    """Trainee list rule: 1 point per full 5h, 1 per 4 lates, whole points."""

    def note(self, absence_hours: float, late_count: int) -> float:
        return calculate_points_note(absence_hours, late_count)
