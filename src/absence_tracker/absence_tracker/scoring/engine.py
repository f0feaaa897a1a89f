from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from ..common.validators import coerce_hours
from ..core.constants import (
    ABSENCE_BLOCK_DEDUCTION,
    ABSENCE_BLOCK_HOURS,
    LATE_BLOCK_DEDUCTION,
    LATE_BLOCK_SIZE,
    LATES_PER_HOUR,
    MAX_NOTE,
    POINTS_ABSENCE_DIVISOR,
)
from ..core.enums import AbsenceStatus
from .model import AggregateResult, DisciplinaryStatus, EventLike, as_event

# Highest tier first; the first threshold reached wins.
DISCIPLINARY_TIERS: tuple[tuple[float, DisciplinaryStatus], ...] = (
    (40, DisciplinaryStatus("EXCL DEF (CD)", "#FF0000")),
    (35, DisciplinaryStatus("EXCL TEMP (CD)", "#FEAE00")),
    (30, DisciplinaryStatus("SUSP 2J (CD)", "#FFA500")),
    (25, DisciplinaryStatus("BLÂME (CD)", "#8B4513")),
    (20, DisciplinaryStatus("2ème MISE (CD)", "#8784b6")),
    (15, DisciplinaryStatus("1er MISE (CD)", "#a084c6")),
    (10, DisciplinaryStatus("2ème AVERT (SC)", "#191E46")),
    (5, DisciplinaryStatus("1er AVERT (SC)", "#235a8c")),
)
NORMAL_STATUS = DisciplinaryStatus("NORMAL", "#9FE855")


@dataclass(frozen=True)
class EventTally:
    """Counts over validated events only."""

    absence_hours: float = 0.0
    late_count: int = 0
    absent_count: int = 0
    justified_count: int = 0


def round1(value: float) -> float:
    """Round to one decimal, halves going up (``floor(v * 10 + 0.5) / 10``)."""
    return math.floor(value * 10 + 0.5) / 10


def _non_negative(value: Any) -> float:
    return max(0.0, coerce_hours(value))


def tally_events(events: Optional[Iterable[EventLike]]) -> EventTally:
    """Unjustified absence hours and event counts, validated events only."""

    hours = 0.0
    lates = 0
    absents = 0
    justified = 0
    for item in events or ():
        event = as_event(item)
        if not event.is_validated:
            continue
        if event.status == AbsenceStatus.ABSENT:
            absents += 1
            if event.is_justified:
                justified += 1
            else:
                hours += coerce_hours(event.absence_hours)
        elif event.status == AbsenceStatus.LATE:
            lates += 1
    return EventTally(absence_hours=hours, late_count=lates, absent_count=absents, justified_count=justified)


def count_validated_lates(events: Optional[Iterable[EventLike]]) -> int:
    return tally_events(events).late_count


def calculate_total_absence_hours(events: Optional[Iterable[EventLike]]) -> float:
    """Chargeable absence hours for a trainee.

    Validated, unjustified absences contribute their hours. Every 4 validated
    late arrivals add one whole hour; leftover lates (0-3) add nothing.
    """

    tally = tally_events(events)
    return round1(tally.absence_hours + tally.late_count // LATES_PER_HOUR)


def get_disciplinary_status(hours: Any) -> DisciplinaryStatus:
    value = coerce_hours(hours)
    for threshold, status in DISCIPLINARY_TIERS:
        if value >= threshold:
            return status
    return NORMAL_STATUS


def calculate_disciplinary_note(absence_hours: Any, late_count: Any) -> float:
    """Note out of 20: -0.5 per full 2.5h of absence, -1 per 4 lates, floor 0."""

    absence_deduction = math.floor(_non_negative(absence_hours) / ABSENCE_BLOCK_HOURS) * ABSENCE_BLOCK_DEDUCTION
    lateness_deduction = math.floor(_non_negative(late_count) / LATE_BLOCK_SIZE) * LATE_BLOCK_DEDUCTION
    note = max(0, MAX_NOTE - absence_deduction - lateness_deduction)
    return round1(note)


def calculate_points_note(absence_hours: Any, late_count: Any) -> int:
    """Trainee-list variant: -1 per full 5h of absence, -1 per 4 lates, floor 0.

    Disagrees with :func:`calculate_disciplinary_note` for the same input;
    both are kept until one formula is chosen as canonical.
    """

    absence_points = math.floor(_non_negative(absence_hours) / POINTS_ABSENCE_DIVISOR)
    late_points = math.floor(_non_negative(late_count) / LATE_BLOCK_SIZE)
    return max(0, MAX_NOTE - absence_points - late_points)


def aggregate(events: Optional[Iterable[EventLike]], *, calculator: Optional[Any] = None) -> AggregateResult:
    """Total hours, status and note for one trainee's events.

    The note is computed from the unjustified absence hours and the late
    count separately, so lates are not charged twice. ``calculator`` is a
    :class:`~.calculator.base.NoteCalculator`; standard formula by default.
    """

    items = list(events or ())
    tally = tally_events(items)
    total = calculate_total_absence_hours(items)
    if calculator is None:
        note: float = calculate_disciplinary_note(tally.absence_hours, tally.late_count)
    else:
        note = calculator.note(tally.absence_hours, tally.late_count)

    return AggregateResult(
        total_absence_hours=total,
        disciplinary_status=get_disciplinary_status(total),
        disciplinary_note=note,
    )
