from datetime import date

import pytest

from attendance_tracker.container import assemble
from attendance_tracker.main import create_app
from conftest import seed_record


@pytest.fixture
def container(users_repo, attendance_repo, policy):
    return assemble(users_repo=users_repo, attendance_repo=attendance_repo, policy=policy)


@pytest.fixture
def app(container):
    return create_app(container, settings_module="config.testing")


@pytest.fixture
def client(app):
    return app.test_client()


def _login_as(client, user_id, role, department):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role
        sess["department"] = department


@pytest.fixture
def employee(client):
    _login_as(client, 1, "employee", "Engineering")
    return client


@pytest.fixture
def manager(client):
    _login_as(client, 9, "manager", "Management")
    return client


def test_health(client):
    resp = client.get("/api/health")

    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_login_and_me(client):
    resp = client.post("/api/auth/login", json={"email": "alice.nguyen@example.com", "password": "secret1"})
    assert resp.status_code == 200
    assert resp.get_json()["user"]["id"] == 1

    me = client.get("/api/auth/me")
    assert me.get_json()["user"]["email"] == "alice.nguyen@example.com"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_login_wrong_password(client):
    resp = client.post("/api/auth/login", json={"email": "alice.nguyen@example.com", "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json()["error"]["kind"] == "authentication_error"


def test_register_employee(client):
    resp = client.post(
        "/api/auth/register",
        json={"name": "Eve Vo", "email": "eve@example.com", "password": "secret", "department": "Sales"},
    )

    assert resp.status_code == 201
    assert resp.get_json()["user"]["role"] == "employee"


def test_anonymous_register_cannot_create_manager(client):
    resp = client.post(
        "/api/auth/register",
        json={"name": "M", "email": "m@example.com", "password": "secret", "role": "manager"},
    )

    assert resp.status_code == 403


def test_anonymous_is_rejected(client):
    resp = client.post("/api/attendance/checkin")

    assert resp.status_code == 401
    assert resp.get_json()["error"]["kind"] == "authentication_error"


def test_checkin_checkout_flow(employee, attendance_repo):
    resp = employee.post("/api/attendance/checkin", json={"notes": "early bird"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["message"].startswith("Checked in successfully")
    assert body["attendance"]["notes"] == "early bird"

    again = employee.post("/api/attendance/checkin")
    assert again.status_code == 400
    assert again.get_json()["error"]["kind"] == "already_checked_in"

    today = employee.get("/api/attendance/today").get_json()
    assert today["hasCheckedIn"] is True
    assert today["hasCheckedOut"] is False

    out = employee.post("/api/attendance/checkout")
    assert out.status_code == 200
    assert out.get_json()["attendance"]["check_out_time"] is not None

    twice = employee.post("/api/attendance/checkout")
    assert twice.get_json()["error"]["kind"] == "already_checked_out"
    assert len(attendance_repo.all()) == 1


def test_checkout_without_checkin(employee):
    resp = employee.post("/api/attendance/checkout")

    assert resp.status_code == 400
    assert resp.get_json()["error"]["kind"] == "no_check_in_found"


def test_my_history(employee, attendance_repo):
    for day in (2, 3, 4):
        seed_record(attendance_repo, 1, date(2026, 3, day))

    resp = employee.get("/api/attendance/my-history?month=3&year=2026&limit=2")

    body = resp.get_json()
    assert resp.status_code == 200
    assert [r["date"] for r in body["attendance"]] == ["2026-03-04", "2026-03-03"]
    assert body["pagination"] == {"total": 3, "page": 1, "limit": 2, "pages": 2}
    assert body["stats"]["totalDays"] == 3


def test_bad_query_parameter(employee):
    resp = employee.get("/api/attendance/my-history?page=abc")

    assert resp.status_code == 400
    assert resp.get_json()["error"]["kind"] == "validation_error"


def test_manager_endpoints_forbid_employees(employee):
    for path in ("/api/attendance/all", "/api/attendance/export", "/api/dashboard/manager"):
        resp = employee.get(path)
        assert resp.status_code == 403, path


def test_all_attendance_filters(manager, attendance_repo):
    seed_record(attendance_repo, 1, date(2026, 3, 2))
    seed_record(attendance_repo, 2, date(2026, 3, 2))
    seed_record(attendance_repo, 3, date(2026, 3, 3))

    resp = manager.get("/api/attendance/all?department=Engineering&search=carol")

    body = resp.get_json()
    assert body["pagination"]["total"] == 1
    assert body["attendance"][0]["employee"]["name"] == "Carol Le"


def test_all_attendance_rejects_reversed_range(manager):
    resp = manager.get("/api/attendance/all?startDate=2026-03-10&endDate=2026-03-01")

    assert resp.status_code == 400


def test_export_csv(manager, attendance_repo):
    seed_record(attendance_repo, 1, date(2026, 3, 2), hours=8.0)

    resp = manager.get("/api/attendance/export?format=csv&startDate=2026-03-01&endDate=2026-03-31")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "attendance_2026-03-01_2026-03-31.csv" in resp.headers["Content-Disposition"]
    text = resp.data.decode("utf-8-sig").splitlines()
    assert text[0] == "Date,Name,Email,Department,Check In,Check Out,Work Hours,Status"
    assert text[1] == "2026-03-02,Alice Nguyen,alice.nguyen@example.com,Engineering,09:00:00,-,8.00,present"


def test_export_json(manager):
    body = manager.get("/api/attendance/export").get_json()

    assert body["data"] == []
    assert body["filename"] == "attendance_all_all.csv"


def test_dashboards(manager):
    data = manager.get("/api/dashboard/manager").get_json()
    assert data["totalEmployees"] == 3
    assert len(data["weeklyTrend"]) == 7

    own = manager.get("/api/dashboard/employee").get_json()
    assert own["today"]["status"] == "not-checked-in"


def test_event_stream_delivers_checkins(app, container):
    manager_client = app.test_client()
    _login_as(manager_client, 9, "manager", "Management")
    employee_client = app.test_client()
    _login_as(employee_client, 1, "employee", "Engineering")

    resp = manager_client.get("/api/events/stream", buffered=False)
    try:
        assert resp.mimetype == "text/event-stream"
        chunks = resp.iter_encoded()
        assert next(chunks) == b": connected\n\n"

        employee_client.post("/api/attendance/checkin")

        frame = next(chunks).decode()
        assert frame.startswith("event: attendance:checkin\n")
        assert '"employeeId": 1' in frame
    finally:
        resp.close()

    assert container.notification_hub.subscriber_count("managers") == 0


def test_event_stream_rejects_foreign_topic(employee):
    resp = employee.get("/api/events/stream?topic=managers")

    assert resp.status_code == 403


def test_roster_endpoints(manager):
    employees = manager.get("/api/users/employees?department=Engineering").get_json()
    assert [e["name"] for e in employees["employees"]] == ["Alice Nguyen", "Carol Le"]
    assert employees["total"] == 2

    departments = manager.get("/api/users/departments").get_json()
    assert departments["departments"] == ["Engineering", "Management", "Sales"]


def test_roster_is_manager_only(employee):
    assert employee.get("/api/users/employees").status_code == 403


def test_register_duplicate_employee_code(client):
    resp = client.post(
        "/api/auth/register",
        json={"name": "Zed", "email": "zed@example.com", "password": "secret", "employeeId": "EMP002"},
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"]["kind"] == "validation_error"


@pytest.mark.parametrize("query", ["month=13&year=2025", "month=0&year=2025", "month=3&year=99999", "month=3&year=0"])
def test_my_history_rejects_out_of_range_month_or_year(employee, attendance_repo, query):
    seed_record(attendance_repo, 1, date(2025, 12, 1))

    resp = employee.get(f"/api/attendance/my-history?{query}")

    assert resp.status_code == 400
    assert resp.get_json()["error"]["kind"] == "validation_error"
