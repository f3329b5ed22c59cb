from __future__ import annotations


def _create_leave(client, **overrides):
    body = {
        "employee_id": 1,
        "leave_type": "annual",
        "start_date": "2026-04-06",
        "end_date": "2026-04-10",
        "reason": "Family trip",
    }
    body.update(overrides)
    return client.post("/api/leave-requests", json=body)


def _create_payroll(client, **overrides):
    body = {
        "employee_id": 1,
        "pay_period_start": "2026-03-01",
        "pay_period_end": "2026-03-31",
        "salary": "5000",
        "bonus": "250.50",
        "deductions": "400",
    }
    body.update(overrides)
    return client.post("/api/payroll", json=body)


def test_health(client):
    res = client.get("/api/health")

    assert res.status_code == 200
    assert res.get_json() == {"success": True, "data": {"status": "ok"}}


def test_clock_in_and_out_over_http(client):
    res = client.post("/api/attendance/clock-in", json={"employee_id": 2, "timestamp": "2026-03-02T09:20:00"})

    assert res.status_code == 201
    data = res.get_json()["data"]
    assert data["status"] == "LATE"
    assert data["status_label"] == "Late"
    assert data["clock_in"] == "2026-03-02T09:20:00"

    res = client.post("/api/attendance/clock-out", json={"employee_id": 2, "timestamp": "2026-03-02T17:20:00"})

    assert res.status_code == 200
    assert res.get_json()["data"]["clock_out"] == "2026-03-02T17:20:00"


def test_second_clock_in_is_409_with_conflicts(client):
    client.post("/api/attendance/clock-in", json={"employee_id": 1, "timestamp": "2026-03-02T08:00:00"})

    res = client.post("/api/attendance/clock-in", json={"employee_id": 1, "timestamp": "2026-03-02T12:00:00"})

    assert res.status_code == 409
    body = res.get_json()
    assert body["success"] is False
    assert body["error"]["code"] == "CONFLICT"
    assert body["error"]["detail"]["conflicts"][0]["employee_id"] == 1


def test_unknown_employee_is_404(client):
    res = client.post("/api/attendance/clock-in", json={"employee_id": 404})

    assert res.status_code == 404
    assert res.get_json()["error"]["code"] == "NOT_FOUND"


def test_missing_employee_id_is_400(client):
    res = client.post("/api/attendance/clock-in", json={})

    assert res.status_code == 400
    assert res.get_json()["error"]["code"] == "VALIDATION_ERROR"


def test_bad_timestamp_is_400(client):
    res = client.post("/api/attendance/clock-in", json={"employee_id": 1, "timestamp": "yesterday"})

    assert res.status_code == 400


def test_clock_in_with_utc_offset_is_accepted(client):
    res = client.post("/api/attendance/clock-in", json={"employee_id": 1, "timestamp": "2026-03-02T08:30:00+07:00"})

    assert res.status_code == 201
    assert "+" not in res.get_json()["data"]["clock_in"]


def test_non_finite_salary_is_400(client):
    res = _create_payroll(client, salary="NaN")

    assert res.status_code == 400
    assert res.get_json()["error"]["code"] == "VALIDATION_ERROR"


def test_salary_beyond_column_size_is_400(client):
    res = _create_payroll(client, salary="1e15")

    assert res.status_code == 400


def test_non_object_body_is_400(client):
    res = client.post("/api/leave-requests", json=[1, 2, 3])

    assert res.status_code == 400


def test_leave_lifecycle_over_http(client):
    res = _create_leave(client)
    assert res.status_code == 201
    leave = res.get_json()["data"]
    assert leave["status"] == "PENDING"
    assert leave["leave_type"] == "ANNUAL"
    assert leave["total_days"] == 5

    res = client.post(f"/api/leave-requests/{leave['leave_id']}/approve", json={"approver_id": 3, "comments": "ok"})
    assert res.status_code == 200
    assert res.get_json()["data"]["status"] == "APPROVED"

    res = client.post(f"/api/leave-requests/{leave['leave_id']}/reject", json={"approver_id": 3})
    assert res.status_code == 409
    error = res.get_json()["error"]
    assert error["code"] == "INVALID_STATE"
    assert error["detail"]["current_status"] == "APPROVED"


def test_overlapping_leave_is_409(client):
    _create_leave(client)

    res = _create_leave(client, start_date="2026-04-08", end_date="2026-04-12")

    assert res.status_code == 409
    assert res.get_json()["error"]["code"] == "CONFLICT"


def test_unknown_leave_type_is_400(client):
    res = _create_leave(client, leave_type="sabbatical")

    assert res.status_code == 400
    assert "ANNUAL" in res.get_json()["error"]["message"]


def test_leave_balances(client):
    _create_leave(client)

    res = client.get("/api/leave-requests/employee/1/balances?year=2026")

    assert res.status_code == 200
    body = res.get_json()
    annual = next(b for b in body["data"] if b["leave_type"] == "ANNUAL")
    assert annual == {"leave_type": "ANNUAL", "allowance": 21, "taken": 5, "remaining": 16, "label": "Annual Leave"}
    assert body["meta"] == {"employee_id": 1, "year": 2026}


def test_payroll_create_and_transitions(client):
    res = _create_payroll(client)
    assert res.status_code == 201
    rec = res.get_json()["data"]
    assert rec["status"] == "DRAFT"
    assert rec["net_pay"] == "4850.50"

    pid = rec["payroll_id"]
    for action, expected in (("submit", "PENDING"), ("approve", "APPROVED"), ("process", "PROCESSING")):
        res = client.post(f"/api/payroll/{pid}/{action}")
        assert res.status_code == 200
        assert res.get_json()["data"]["status"] == expected

    res = client.delete(f"/api/payroll/{pid}")
    assert res.status_code == 409
    assert res.get_json()["error"]["detail"]["current_status"] == "PROCESSING"


def test_unknown_payroll_action_is_404(client):
    pid = _create_payroll(client).get_json()["data"]["payroll_id"]

    res = client.post(f"/api/payroll/{pid}/teleport")

    assert res.status_code == 404


def test_negative_salary_is_400(client):
    res = _create_payroll(client, salary="-10")

    assert res.status_code == 400


def test_bulk_payroll_reports_counts(client):
    res = client.post(
        "/api/payroll/bulk",
        json={
            "items": [
                {"employee_id": 1, "pay_period_start": "2026-03-01", "pay_period_end": "2026-03-31", "salary": 3000},
                {"employee_id": 2, "pay_period_start": "2026-03-01", "salary": 3000},
                {"employee_id": 99, "pay_period_start": "2026-03-01", "pay_period_end": "2026-03-31", "salary": 3000},
            ]
        },
    )

    assert res.status_code == 201
    body = res.get_json()
    assert body["meta"] == {"submitted": 3, "created": 1}
    assert body["data"][0]["status"] == "PENDING"


def test_soft_deleted_record_is_hidden_unless_asked(client):
    pid = _create_payroll(client).get_json()["data"]["payroll_id"]
    client.delete(f"/api/payroll/{pid}")

    assert client.get(f"/api/payroll/{pid}").status_code == 404

    res = client.get(f"/api/payroll/{pid}?include_deleted=true")
    assert res.status_code == 200
    assert res.get_json()["data"]["deleted"] is True

    res = client.post(f"/api/payroll/{pid}/restore")
    assert res.status_code == 200
    assert res.get_json()["data"]["deleted"] is False
