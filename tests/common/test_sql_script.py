from __future__ import annotations

from pathlib import Path

from src.hr_workflow.hr_workflow.database.bootstrap import iter_sql_statements, prepare_script

DATABASE_DIR = Path(__file__).resolve().parents[2] / "database"


def test_splits_on_semicolons_outside_quotes():
    sql = "INSERT INTO t VALUES ('a;b'); INSERT INTO t VALUES (\"c;d\");\nSELECT `x;y` FROM t"

    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        'INSERT INTO t VALUES ("c;d")',
        "SELECT `x;y` FROM t",
    ]


def test_escaped_quote_does_not_end_string():
    sql = r"INSERT INTO t VALUES ('it\'s; fine'); SELECT 1"

    assert len(list(iter_sql_statements(sql))) == 2


def test_prepare_script_drops_database_lines_and_comments():
    sql = "CREATE DATABASE IF NOT EXISTS hr;\nUSE hr;\n-- employees\nCREATE TABLE e (id INT);\n"

    assert list(iter_sql_statements(prepare_script(sql))) == ["CREATE TABLE e (id INT)"]


def test_schema_file_defines_workflow_tables():
    statements = list(iter_sql_statements(prepare_script((DATABASE_DIR / "schema.sql").read_text(encoding="utf-8"))))
    created = " ".join(s for s in statements if s.upper().startswith("CREATE TABLE"))

    for table in ("employees", "attendance_records", "leave_requests", "payroll_records"):
        assert table in created


def test_comment_markers_inside_quotes_are_kept():
    sql = "INSERT INTO t VALUES ('line one\n-- not a comment\nline three'); -- trailing note\nSELECT 1 -- why\n;"

    assert list(iter_sql_statements(prepare_script(sql))) == [
        "INSERT INTO t VALUES ('line one\n-- not a comment\nline three')",
        "SELECT 1",
    ]


def test_comment_with_semicolon_does_not_split():
    sql = "-- setup; teardown\nCREATE TABLE a (id INT);\n  -- it's fine\nCREATE TABLE b (id INT)"

    assert list(iter_sql_statements(sql)) == ["CREATE TABLE a (id INT)", "CREATE TABLE b (id INT)"]
