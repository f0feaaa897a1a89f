from __future__ import annotations

from ..engine import calculate_disciplinary_note
from .base import NoteCalculator


class StandardNoteCalculator(NoteCalculator):
    """Standard rule: 0.5 per full 2.5h, 1 per 4 lates, 1 decimal, not below 0."""

    def note(self, absence_hours: float, late_count: int) -> float:
        return calculate_disciplinary_note(absence_hours, late_count)
