from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .absences.mysql_absence_repository import MySQLAbsenceRepository
from .absences.repository import AbsenceRepository
from .absences.service import AbsenceService
from .database.connection import DatabaseConnection, DBConfig
from .groups.mysql_group_repository import MySQLGroupRepository
from .groups.repository import GroupRepository
from .groups.service import GroupService
from .reports.service import ReportService
from .scoring.calculator.factory import calculator_for
from .trainees.mysql_trainee_repository import MySQLTraineeRepository
from .trainees.repository import TraineeRepository
from .trainees.service import TraineeService


@dataclass(frozen=True)
class Container:
    trainees_repo: TraineeRepository
    absences_repo: AbsenceRepository
    groups_repo: GroupRepository

    trainee_service: TraineeService
    absence_service: AbsenceService
    group_service: GroupService
    report_service: ReportService

    conn: Optional[DatabaseConnection] = None


def build_services(
    trainees_repo: TraineeRepository,
    absences_repo: AbsenceRepository,
    groups_repo: GroupRepository,
    *,
    note_formula: str = "points",
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    trainee_service = TraineeService(
        trainees_repo,
        absences_repo,
        groups=groups_repo,
        list_calculator=calculator_for(note_formula),
    )
    return Container(
        trainees_repo=trainees_repo,
        absences_repo=absences_repo,
        groups_repo=groups_repo,
        trainee_service=trainee_service,
        absence_service=AbsenceService(absences_repo),
        group_service=GroupService(groups_repo, trainees_repo, absences_repo),
        report_service=ReportService(trainees_repo, absences_repo, trainee_service),
        conn=conn,
    )


def build_container(*, db_config: dict, note_formula: str = "points") -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    return build_services(
        MySQLTraineeRepository(conn),
        MySQLAbsenceRepository(conn),
        MySQLGroupRepository(conn),
        note_formula=note_formula,
        conn=conn,
    )
