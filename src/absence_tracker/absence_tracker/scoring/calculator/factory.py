from __future__ import annotations

from ...core.enums import NoteFormula
from ...core.exceptions import ValidationError
from .base import NoteCalculator
from .points_calculator import PointsNoteCalculator
from .standard_calculator import StandardNoteCalculator


def calculator_for(formula: NoteFormula | str) -> NoteCalculator:
    """Factory Pattern: pick the note calculator configured for a surface."""

    try:
        formula = NoteFormula(str(getattr(formula, "value", formula)).lower())
    except ValueError:
        raise ValidationError(f"Unknown note formula: {formula!r}")

    if formula == NoteFormula.POINTS:
        return PointsNoteCalculator()
    return StandardNoteCalculator()
