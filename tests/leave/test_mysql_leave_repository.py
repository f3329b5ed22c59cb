from __future__ import annotations

from datetime import date

import pytest

from src.hr_workflow.hr_workflow.core.enums import LeaveStatus, LeaveType
from src.hr_workflow.hr_workflow.core.exceptions import ConflictError
from src.hr_workflow.hr_workflow.leave.mysql_leave_repository import MySQLLeaveRepository


def _kind(sql):
    text = " ".join(sql.split()).upper()
    for marker in ("GET_LOCK", "RELEASE_LOCK", "INSERT", "UPDATE"):
        if marker in text:
            return marker
    return "SELECT"


class RecordingCursor:
    def __init__(self, conn):
        self.conn = conn
        self.rowcount = 1
        self.lastrowid = 7
        self._last = None

    def execute(self, sql, params=()):
        self._last = _kind(sql)
        self.conn.calls.append(self._last)
        self.conn.statements.append((sql, params))

    def fetchone(self):
        if self._last == "GET_LOCK":
            return {"acquired": 1}
        return self.conn.row

    def fetchall(self):
        if self._last == "SELECT":
            return list(self.conn.overlaps)
        return []

    def close(self):
        pass


class RecordingConnection:
    def __init__(self, row=None, overlaps=()):
        self.calls = []
        self.statements = []
        self.row = row
        self.overlaps = overlaps

    def cursor(self, dictionary=True):
        return RecordingCursor(self)

    def commit(self):
        self.calls.append("commit")

    def rollback(self):
        self.calls.append("rollback")

    def close(self):
        pass


class RecordingFactory:
    def __init__(self, conn):
        self.conn = conn

    def connect(self):
        return self.conn


def _overlap_row():
    return {
        "leave_id": 3,
        "employee_id": 1,
        "leave_type": "ANNUAL",
        "start_date": date(2026, 4, 6),
        "end_date": date(2026, 4, 10),
        "total_days": 5,
        "reason": None,
        "status": "PENDING",
        "request_date": date(2026, 3, 2),
    }


def _create(repo):
    return repo.create(
        employee_id=1,
        leave_type=LeaveType.ANNUAL,
        start_date=date(2026, 4, 6),
        end_date=date(2026, 4, 10),
        total_days=5,
        reason=None,
        request_date=date(2026, 3, 2),
    )


def test_create_commits_before_releasing_lock():
    conn = RecordingConnection()

    assert _create(MySQLLeaveRepository(RecordingFactory(conn))) == 7
    assert conn.calls[:4] == ["GET_LOCK", "SELECT", "INSERT", "commit"]
    assert conn.calls.index("commit") < conn.calls.index("RELEASE_LOCK")


def test_update_with_overlap_check_commits_before_releasing_lock():
    conn = RecordingConnection()
    repo = MySQLLeaveRepository(RecordingFactory(conn))

    assert repo.update_pending(5, {"reason": "moved"}, overlap_window=(1, date(2026, 4, 6), date(2026, 4, 8)))
    assert conn.calls.index("UPDATE") < conn.calls.index("commit") < conn.calls.index("RELEASE_LOCK")


def test_restore_commits_before_releasing_lock():
    row = {"employee_id": 1, "start_date": date(2026, 4, 6), "end_date": date(2026, 4, 10)}
    conn = RecordingConnection(row=row)
    repo = MySQLLeaveRepository(RecordingFactory(conn))

    assert repo.restore(5, check_overlap=True)
    assert conn.calls.index("UPDATE") < conn.calls.index("commit") < conn.calls.index("RELEASE_LOCK")


def test_overlap_rolls_back_before_releasing_lock():
    conn = RecordingConnection(overlaps=[_overlap_row()])

    with pytest.raises(ConflictError):
        _create(MySQLLeaveRepository(RecordingFactory(conn)))

    assert "INSERT" not in conn.calls
    assert "commit" not in conn.calls
    assert conn.calls.index("rollback") < conn.calls.index("RELEASE_LOCK")


def test_transition_without_comments_keeps_stored_comments():
    conn = RecordingConnection()
    repo = MySQLLeaveRepository(RecordingFactory(conn))

    assert repo.transition(
        5,
        current=LeaveStatus.PENDING,
        target=LeaveStatus.CANCELLED,
        response_date=date(2026, 3, 2),
        comments=None,
    )

    sql, params = conn.statements[-1]
    assert "comments=COALESCE(%s, comments)" in " ".join(sql.split())
    assert params[3] is None
