from .conftest import PASSWORD


def test_admin_sees_company_activity(client, seed, make_expense):
    expense = make_expense()

    response = client.get("/api/activity-logs", headers=seed.headers["admin"])

    assert response.status_code == 200
    logs = response.get_json()["activity_logs"]
    assert [log["action"] for log in logs] == ["EXPENSE_SUBMITTED", "EXPENSE_CREATED"]
    assert logs[0]["expense_id"] == expense["id"]
    assert logs[0]["expense"]["description"] == "Cab to client office"
    assert logs[0]["details"]["path"] == "/api/expenses"
    assert logs[0]["user"]["id"] == seed.ids["employee"]


def test_filters(client, seed, make_expense):
    first = make_expense()
    make_expense(role="peer")

    by_action = client.get("/api/activity-logs?action=expense_created", headers=seed.headers["admin"]).get_json()
    assert len(by_action["activity_logs"]) == 2

    by_user = client.get(f"/api/activity-logs?user_id={seed.ids['peer']}", headers=seed.headers["admin"]).get_json()
    assert {log["user_id"] for log in by_user["activity_logs"]} == {seed.ids["peer"]}

    by_expense = client.get(f"/api/activity-logs?expense_id={first['id']}", headers=seed.headers["admin"]).get_json()
    assert {log["expense_id"] for log in by_expense["activity_logs"]} == {first["id"]}

    assert client.get("/api/activity-logs?action=HACKED", headers=seed.headers["admin"]).status_code == 400


def test_manager_sees_only_team_activity(client, seed, make_expense):
    make_expense()
    make_expense(role="peer")

    logs = client.get("/api/activity-logs", headers=seed.headers["manager"]).get_json()["activity_logs"]
    assert {log["user_id"] for log in logs} == {seed.ids["employee"]}


def test_activity_is_tenant_scoped(client, seed, make_expense):
    make_expense()
    logs = client.get("/api/activity-logs", headers=seed.headers["outsider"]).get_json()["activity_logs"]
    assert logs == []


def test_employee_cannot_read_activity(client, seed):
    assert client.get("/api/activity-logs", headers=seed.headers["employee"]).status_code == 403


def test_stats(client, seed, make_expense):
    make_expense()
    client.post("/api/auth/login", json={"email": seed.emails["manager"], "password": PASSWORD})

    response = client.get("/api/activity-logs/stats?days=7", headers=seed.headers["admin"])

    assert response.status_code == 200
    body = response.get_json()
    assert body["stats"] == {"EXPENSE_CREATED": 1, "EXPENSE_SUBMITTED": 1, "LOGIN": 1}
    assert body["total"] == 3


def test_stats_validation_and_access(client, seed):
    assert client.get("/api/activity-logs/stats?days=0", headers=seed.headers["admin"]).status_code == 400
    assert client.get("/api/activity-logs/stats?days=400", headers=seed.headers["admin"]).status_code == 400
    assert client.get("/api/activity-logs/stats", headers=seed.headers["manager"]).status_code == 403
