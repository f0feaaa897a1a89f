from __future__ import annotations

from abc import ABC, abstractmethod


class NoteCalculator(ABC):
    """Calculator interface (Strategy Pattern for the disciplinary note)."""

    @abstractmethod
    def note(self, absence_hours: float, late_count: int) -> float:
        raise NotImplementedError
