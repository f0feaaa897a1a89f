from __future__ import annotations

import io
from collections import defaultdict
from datetime import date
from typing import Optional

import pandas as pd

from ..absences.repository import AbsenceRepository
from ..common.datetime_utils import iter_days
from ..core.constants import WEEKDAY_LABELS
from ..core.enums import AbsenceStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..trainees.repository import TraineeRepository
from ..trainees.service import TraineeService

EXPORT_COLUMNS = {
    "cef": "CEF",
    "name": "Nom",
    "first_name": "Prénom",
    "groupe": "Groupe",
    "totalAbsenceHours": "Heures d'absence",
    "status": "Statut disciplinaire",
    "disciplinaryNote": "Note disciplinaire",
}


class ReportService:
    def __init__(self, trainees: TraineeRepository, absences: AbsenceRepository, trainee_service: TraineeService):
        self._trainees = trainees
        self._absences = absences
        self._trainee_service = trainee_service

    def weekly_report(self, *, groupe: str, start: date, end: date) -> dict:
        """Per-day absence grid for a group; Sundays are skipped."""

        if start > end:
            raise ValidationError("start_date must be before end_date")

        trainees = list(self._trainees.list_all(groupe=groupe))
        if not trainees:
            raise NotFoundError("Group not found")

        sessions = list(self._absences.list_sessions(groupe=groupe, start_date=start, end_date=end))
        session_by_id = {s.session_id: s for s in sessions}

        # (trainee_id, day) -> absences of that day
        cells: dict[tuple[int, date], list[dict]] = defaultdict(list)
        for a in self._absences.list_for_sessions(list(session_by_id)):
            s = session_by_id[a.session_id]
            cells[(a.trainee_id, s.session_date)].append(
                {
                    "id": a.absence_id,
                    "status": a.status.value,
                    "is_justified": a.is_justified,
                    "start_time": s.start_time.strftime("%H:%M"),
                    "end_time": s.end_time.strftime("%H:%M"),
                    "absence_hours": a.absence_hours,
                }
            )

        days = [
            {"name": WEEKDAY_LABELS[d.weekday()], "date": d.strftime("%Y-%m-%d"), "day": d.day}
            for d in iter_days(start, end)
            if d.weekday() != 6
        ]

        rows = []
        for t in trainees:
            week = []
            for day in days:
                d = date.fromisoformat(day["date"])
                day_absences = cells.get((t.trainee_id, d), [])
                week.append(
                    {
                        "date": day["date"],
                        "absences": day_absences,
                        "is_absent": any(x["status"] == AbsenceStatus.ABSENT.value for x in day_absences),
                        "is_late": any(x["status"] == AbsenceStatus.LATE.value for x in day_absences),
                    }
                )
            rows.append(
                {
                    "id": t.trainee_id,
                    "cef": t.cef,
                    "name": t.name,
                    "first_name": t.first_name,
                    "week_absences": week,
                }
            )

        return {
            "group": groupe,
            "days": days,
            "trainees": rows,
            "start_date": start.strftime("%Y-%m-%d"),
            "end_date": end.strftime("%Y-%m-%d"),
            "formatted_start": start.strftime("%d/%m/%Y"),
            "formatted_end": end.strftime("%d/%m/%Y"),
        }

    def export_trainee_stats_xlsx(self, *, groupe: Optional[str] = None) -> bytes:
        data = []
        for item in self._trainee_service.list_with_stats(groupe=groupe):
            row = {k: item.get(k) for k in EXPORT_COLUMNS if k != "status"}
            row["status"] = item["disciplinaryStatus"]["text"]
            data.append(row)

        df = pd.DataFrame(data, columns=list(EXPORT_COLUMNS)).rename(columns=EXPORT_COLUMNS)

        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Stagiaires")
        return output.getvalue()
