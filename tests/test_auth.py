from swiftexpense import db
from swiftexpense.models import ActivityAction, ActivityLog, User

from .conftest import PASSWORD


def _register(client, **overrides):
    payload = {
        "email": "new.founder@startup.in",
        "password": "supersecret",
        "first_name": "Nia",
        "last_name": "Founder",
        "company_name": "StartupCo",
        "country": "India",
    }
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


def test_register_new_company_makes_admin(client, app):
    response = _register(client)

    assert response.status_code == 201
    body = response.get_json()
    assert body["user"]["role"] == "ADMIN"
    assert body["user"]["company"]["name"] == "StartupCo"
    assert body["user"]["company"]["currency_code"] == "INR"
    assert body["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.get_json()["user"]["email"] == "new.founder@startup.in"


def test_register_into_existing_company_makes_employee(client, seed):
    response = _register(client, email="joiner@techcorp.in", company_name="TechCorp")

    assert response.status_code == 201
    user = response.get_json()["user"]
    assert user["role"] == "EMPLOYEE"
    assert user["company_id"] == seed.company_id


def test_register_rejects_duplicate_email(client, seed):
    response = _register(client, email=seed.emails["employee"])
    assert response.status_code == 409


def test_register_validation_errors(client):
    response = _register(client, email="not-an-email", password="short")

    assert response.status_code == 400
    errors = response.get_json()["errors"]
    assert "email" in errors
    assert "password" in errors


def test_login_issues_token_and_logs_activity(client, app, seed):
    response = client.post("/api/auth/login", json={"email": seed.emails["employee"], "password": PASSWORD})

    assert response.status_code == 200
    body = response.get_json()
    assert body["token"]
    assert body["user"]["id"] == seed.ids["employee"]

    with app.app_context():
        user = db.session.get(User, seed.ids["employee"])
        assert user.last_login_at is not None
        assert ActivityLog.query.filter_by(user_id=user.id, action=ActivityAction.LOGIN).count() == 1


def test_login_email_is_case_insensitive(client, seed):
    response = client.post(
        "/api/auth/login", json={"email": seed.emails["employee"].upper(), "password": PASSWORD}
    )
    assert response.status_code == 200


def test_login_wrong_password(client, seed):
    response = client.post("/api/auth/login", json={"email": seed.emails["employee"], "password": "wrong-pass"})

    assert response.status_code == 401
    assert response.get_json()["error"] == "Invalid credentials."


def test_login_deactivated_account(client, app, seed):
    with app.app_context():
        db.session.get(User, seed.ids["peer"]).is_active = False
        db.session.commit()

    response = client.post("/api/auth/login", json={"email": seed.emails["peer"], "password": PASSWORD})

    assert response.status_code == 401
    assert response.get_json()["error"] == "Account is deactivated."


def test_protected_route_requires_token(client, seed):
    assert client.get("/api/auth/me").status_code == 401
    bad = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401
    assert bad.get_json()["error"] == "Invalid or missing access token."


def test_refresh_returns_working_token(client, seed):
    response = client.post("/api/auth/refresh", headers=seed.headers["manager"])

    assert response.status_code == 200
    token = response.get_json()["token"]
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.get_json()["user"]["id"] == seed.ids["manager"]


def test_logout(client):
    response = client.post("/api/auth/logout")
    assert response.status_code == 200


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"
