"""
Shared fixtures for the SwiftExpense API tests.

Every test gets a fresh application bound to an in-memory SQLite database and
a seeded company:

- TechCorp (INR): an admin, a manager, an employee reporting to the manager
  and a peer employee with no manager
- Globex (USD): a single admin used for tenant-isolation checks

Outbound HTTP from the currency gateway is disabled; individual tests patch
the gateway when they need live-looking rates.
"""
from __future__ import annotations

from types import SimpleNamespace

import pytest
import requests

from swiftexpense import create_app, db
from swiftexpense.models import Company, User, UserRole
from swiftexpense.services import currency_service
from swiftexpense.services.token_service import create_access_token

PASSWORD = "password123"


@pytest.fixture(autouse=True)
def offline_lookups(monkeypatch):
    def _offline(*args, **kwargs):
        raise requests.ConnectionError("network disabled in tests")

    monkeypatch.setattr(currency_service.requests, "get", _offline)
    currency_service.clear_cache()
    yield
    currency_service.clear_cache()


@pytest.fixture
def app(tmp_path):
    app = create_app("testing")
    app.config.update(UPLOAD_FOLDER=str(tmp_path / "receipts"))
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _add_user(company, email, role, first_name, manager=None):
    user = User(
        first_name=first_name,
        last_name="Tester",
        email=email,
        role=role,
        company=company,
        manager=manager,
        is_active=True,
        preferences={},
    )
    user.set_password(PASSWORD)
    db.session.add(user)
    db.session.flush()
    return user


@pytest.fixture
def seed(app):
    with app.app_context():
        techcorp = Company(
            name="TechCorp",
            country="India",
            currency_code="INR",
            settings=dict(app.config["DEFAULT_COMPANY_SETTINGS"]),
        )
        globex = Company(name="Globex", country="United States", currency_code="USD", settings={})
        db.session.add_all([techcorp, globex])
        db.session.flush()

        admin = _add_user(techcorp, "asha.admin@techcorp.in", UserRole.ADMIN, "Asha")
        manager = _add_user(techcorp, "meera.manager@techcorp.in", UserRole.MANAGER, "Meera")
        employee = _add_user(techcorp, "eli.employee@techcorp.in", UserRole.EMPLOYEE, "Eli", manager=manager)
        peer = _add_user(techcorp, "pia.peer@techcorp.in", UserRole.EMPLOYEE, "Pia")
        outsider = _add_user(globex, "otto.admin@globex.com", UserRole.ADMIN, "Otto")
        db.session.commit()

        users = {"admin": admin, "manager": manager, "employee": employee, "peer": peer, "outsider": outsider}
        return SimpleNamespace(
            company_id=techcorp.id,
            other_company_id=globex.id,
            ids={name: user.id for name, user in users.items()},
            emails={name: user.email for name, user in users.items()},
            headers={
                name: {"Authorization": f"Bearer {create_access_token(user)}"} for name, user in users.items()
            },
        )


@pytest.fixture
def make_expense(client, seed):
    """Create an expense through the API and return its JSON representation."""

    def _make(role="employee", **overrides):
        payload = {
            "amount": 2500,
            "category": "TRAVEL",
            "description": "Cab to client office",
            "expense_date": "2025-10-01",
        }
        payload.update(overrides)
        response = client.post("/api/expenses", json=payload, headers=seed.headers[role])
        assert response.status_code == 201, response.get_json()
        return response.get_json()["expense"]

    return _make
