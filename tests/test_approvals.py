from swiftexpense import db
from swiftexpense.models import (
    ActivityAction,
    ActivityLog,
    ApprovalStep,
    Notification,
    NotificationType,
    User,
    UserRole,
)


def test_manager_approves_assigned_expense(client, app, seed, make_expense):
    expense = make_expense()

    response = client.post(
        f"/api/approvals/{expense['id']}/approve", json={"comments": "Looks good"}, headers=seed.headers["manager"]
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body["expense"]["status"] == "APPROVED"
    assert body["approval"]["status"] == "APPROVED"
    assert body["approval"]["comments"] == "Looks good"
    assert body["approval"]["decided_at"] is not None

    with app.app_context():
        approved = Notification.query.filter_by(
            user_id=seed.ids["employee"], type=NotificationType.EXPENSE_APPROVED
        ).one()
        assert "Looks good" in approved.message
        assert ActivityLog.query.filter_by(
            expense_id=expense["id"], action=ActivityAction.EXPENSE_APPROVED, user_id=seed.ids["manager"]
        ).count() == 1


def test_decisions_are_final(client, seed, make_expense):
    expense = make_expense()
    client.post(f"/api/approvals/{expense['id']}/reject", json={"comments": "Duplicate"}, headers=seed.headers["manager"])

    again = client.post(f"/api/approvals/{expense['id']}/approve", headers=seed.headers["manager"])
    assert again.status_code == 409
    admin = client.post(f"/api/approvals/{expense['id']}/approve", headers=seed.headers["admin"])
    assert admin.status_code == 409


def test_reject_records_comments(client, app, seed, make_expense):
    expense = make_expense()

    response = client.post(
        f"/api/approvals/{expense['id']}/reject", json={"comments": "Missing receipt"}, headers=seed.headers["manager"]
    )

    assert response.status_code == 200
    assert response.get_json()["expense"]["status"] == "REJECTED"
    with app.app_context():
        rejected = Notification.query.filter_by(
            user_id=seed.ids["employee"], type=NotificationType.EXPENSE_REJECTED
        ).one()
        assert rejected.data["comments"] == "Missing receipt"


def test_rejection_comment_can_be_required(client, seed, make_expense):
    client.put(
        "/api/companies/current",
        json={"settings": {"require_rejection_comment": True}},
        headers=seed.headers["admin"],
    )
    expense = make_expense()

    response = client.post(f"/api/approvals/{expense['id']}/reject", json={"comments": "  "}, headers=seed.headers["manager"])
    assert response.status_code == 400

    current = client.get(f"/api/expenses/{expense['id']}", headers=seed.headers["employee"]).get_json()["expense"]
    assert current["status"] == "PENDING"
    assert current["approval_steps"][0]["status"] == "PENDING"


def test_employee_cannot_decide(client, seed, make_expense):
    expense = make_expense()
    response = client.post(f"/api/approvals/{expense['id']}/approve", headers=seed.headers["employee"])
    assert response.status_code == 403


def test_no_self_approval(client, seed, make_expense):
    expense = make_expense(role="manager")

    response = client.post(f"/api/approvals/{expense['id']}/approve", headers=seed.headers["manager"])
    assert response.status_code == 403

    current = client.get(f"/api/expenses/{expense['id']}", headers=seed.headers["manager"]).get_json()["expense"]
    assert current["status"] == "PENDING"


def test_admin_can_take_over_step(client, seed, make_expense):
    expense = make_expense()

    response = client.post(f"/api/approvals/{expense['id']}/approve", headers=seed.headers["admin"])

    assert response.status_code == 200
    steps = response.get_json()["expense"]["approval_steps"]
    assert len(steps) == 1
    assert steps[0]["approver_id"] == seed.ids["admin"]


def test_unassigned_manager_cannot_decide(client, app, seed, make_expense):
    with app.app_context():
        other_manager = User(
            first_name="Omar",
            last_name="Tester",
            email="omar.manager@techcorp.in",
            role=UserRole.MANAGER,
            company_id=seed.company_id,
            is_active=True,
            preferences={},
        )
        other_manager.set_password("password123")
        db.session.add(other_manager)
        db.session.commit()

    login = client.post(
        "/api/auth/login", json={"email": "omar.manager@techcorp.in", "password": "password123"}
    ).get_json()
    headers = {"Authorization": f"Bearer {login['token']}"}

    expense = make_expense()
    # Not a report of Omar and not assigned to him, so the expense is invisible.
    response = client.post(f"/api/approvals/{expense['id']}/approve", headers=headers)
    assert response.status_code == 404


def test_other_company_cannot_decide(client, seed, make_expense):
    expense = make_expense()
    response = client.post(f"/api/approvals/{expense['id']}/approve", headers=seed.headers["outsider"])
    assert response.status_code == 404


def test_pending_and_history_queues(client, seed, make_expense):
    first = make_expense(description="Hotel")
    second = make_expense(description="Taxi")

    pending = client.get("/api/approvals/pending", headers=seed.headers["manager"]).get_json()
    assert [item["expense_id"] for item in pending["approvals"]] == [first["id"], second["id"]]
    assert pending["approvals"][0]["expense"]["description"] == "Hotel"
    assert pending["pagination"]["total"] == 2

    client.post(f"/api/approvals/{first['id']}/approve", headers=seed.headers["manager"])

    pending = client.get("/api/approvals/pending", headers=seed.headers["manager"]).get_json()
    assert [item["expense_id"] for item in pending["approvals"]] == [second["id"]]

    history = client.get("/api/approvals/history", headers=seed.headers["manager"]).get_json()
    assert [item["expense_id"] for item in history["approvals"]] == [first["id"]]
    assert history["approvals"][0]["status"] == "APPROVED"

    rejected_only = client.get("/api/approvals/history?status=REJECTED", headers=seed.headers["manager"]).get_json()
    assert rejected_only["approvals"] == []

    admin_pending = client.get("/api/approvals/pending", headers=seed.headers["admin"]).get_json()
    assert [item["expense_id"] for item in admin_pending["approvals"]] == [second["id"]]


def test_employee_has_no_approval_queue(client, seed):
    assert client.get("/api/approvals/pending", headers=seed.headers["employee"]).status_code == 403


def test_numeric_comments_are_read_as_text(client, seed, make_expense):
    expense = make_expense()

    response = client.post(
        f"/api/approvals/{expense['id']}/approve", json={"comments": 5}, headers=seed.headers["manager"]
    )

    assert response.status_code == 200
    assert response.get_json()["approval"]["comments"] == "5"


def test_admin_queue_lists_expenses_without_approver(client, app, seed, make_expense):
    expense = make_expense()
    with app.app_context():
        ApprovalStep.query.filter_by(expense_id=expense["id"]).delete()
        db.session.commit()

    admin_pending = client.get("/api/approvals/pending", headers=seed.headers["admin"]).get_json()
    assert admin_pending["approvals"] == []
    assert [item["id"] for item in admin_pending["unassigned"]] == [expense["id"]]

    manager_pending = client.get("/api/approvals/pending", headers=seed.headers["manager"]).get_json()
    assert "unassigned" not in manager_pending

    decided = client.post(f"/api/approvals/{expense['id']}/approve", headers=seed.headers["admin"])
    assert decided.status_code == 200
    admin_pending = client.get("/api/approvals/pending", headers=seed.headers["admin"]).get_json()
    assert admin_pending["unassigned"] == []
