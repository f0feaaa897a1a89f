from __future__ import annotations

from datetime import datetime

from src.absence_tracker.absence_tracker.absences.mysql_absence_repository import MySQLAbsenceRepository
from src.absence_tracker.absence_tracker.core.enums import AbsenceStatus


class FakeCursor:
    """Answers existence lookups; UPDATEs report 0 affected rows like an unchanged MySQL row."""

    def __init__(self, existing):
        self.existing = set(existing)
        self.statements: list[str] = []
        self.rowcount = 0
        self._row = None

    def execute(self, sql, params=()):
        sql = " ".join(sql.split())
        self.statements.append(sql)
        if "COUNT(*)" in sql:
            self._row = {"found": sum(1 for p in params if p in self.existing)}
        elif sql.startswith("SELECT"):
            self._row = {"absence_id": params[0]} if params[0] in self.existing else None
        else:
            self.rowcount = 0

    def fetchone(self):
        return self._row

    def close(self):
        pass


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self, existing=()):
        self.cursor = FakeCursor(existing)

    def connect(self, *, with_database=True):
        return FakeConnection(self.cursor)


def test_revalidating_an_unchanged_row_still_succeeds():
    factory = FakeConnectionFactory(existing=[4])
    repo = MySQLAbsenceRepository(factory)

    ok = repo.set_validation(absence_id=4, is_validated=True, validated_by=7, validated_at=datetime(2025, 11, 26, 10))

    assert ok is True
    assert factory.cursor.statements[-1].startswith("UPDATE trainee_absences")


def test_missing_row_is_not_updated():
    factory = FakeConnectionFactory(existing=[4])
    repo = MySQLAbsenceRepository(factory)

    assert repo.set_billet_entree(absence_id=99, value=True) is False
    assert repo.update_status(absence_id=99, status=AbsenceStatus.LATE, absence_hours=1) is False
    assert not any(s.startswith("UPDATE") for s in factory.cursor.statements)


def test_validate_many_counts_existing_rows():
    factory = FakeConnectionFactory(existing=[3, 4])
    repo = MySQLAbsenceRepository(factory)

    assert repo.validate_many(absence_ids=[3, 4, 99], validated_by=7, validated_at=datetime(2025, 11, 26)) == 2
