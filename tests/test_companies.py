def test_current_company(client, seed):
    response = client.get("/api/companies/current", headers=seed.headers["employee"])

    assert response.status_code == 200
    company = response.get_json()["company"]
    assert company["name"] == "TechCorp"
    assert company["currency_code"] == "INR"


def test_company_list_is_tenant_scoped(client, seed):
    response = client.get("/api/companies", headers=seed.headers["admin"])
    assert [company["id"] for company in response.get_json()["companies"]] == [seed.company_id]


def test_admin_updates_settings(client, seed):
    response = client.put(
        "/api/companies/current",
        json={"settings": {"require_rejection_comment": True}, "currency_code": "usd"},
        headers=seed.headers["admin"],
    )

    assert response.status_code == 200
    company = response.get_json()["company"]
    assert company["currency_code"] == "USD"
    assert company["settings"]["require_rejection_comment"] is True
    # Untouched keys survive a partial settings update.
    assert company["settings"]["auto_approval_threshold"] == 5000


def test_company_update_validation(client, seed):
    bad_currency = client.put(
        "/api/companies/current", json={"currency_code": "RUPEES"}, headers=seed.headers["admin"]
    )
    assert bad_currency.status_code == 400

    bad_settings = client.put("/api/companies/current", json={"settings": ["nope"]}, headers=seed.headers["admin"])
    assert bad_settings.status_code == 400

    taken = client.put("/api/companies/current", json={"name": "Globex"}, headers=seed.headers["admin"])
    assert taken.status_code == 409


def test_only_admin_updates_company(client, seed):
    response = client.put("/api/companies/current", json={"name": "Renamed"}, headers=seed.headers["manager"])
    assert response.status_code == 403


def test_currencies_and_countries_fall_back_offline(client, seed):
    currencies = client.get("/api/companies/currencies", headers=seed.headers["employee"]).get_json()["currencies"]
    assert "INR" in {currency["code"] for currency in currencies}

    countries = client.get("/api/companies/countries", headers=seed.headers["employee"]).get_json()["countries"]
    assert {"name": "India", "currency_code": "INR"} in countries


def test_exchange_rate_uses_fallback_table(client, seed):
    response = client.get("/api/companies/exchange-rates?from=INR&to=USD", headers=seed.headers["employee"])

    assert response.status_code == 200
    body = response.get_json()
    assert body["rate"] == 0.012
    assert body["success"] is True


def test_exchange_rate_unknown_pair_reports_failure(client, seed):
    response = client.get("/api/companies/exchange-rates?from=USD", headers=seed.headers["employee"])

    body = response.get_json()
    assert body["to"] == "INR"
    assert body["rate"] == 1.0
    assert body["success"] is False


def test_exchange_rate_requires_codes(client, seed):
    response = client.get("/api/companies/exchange-rates?from=dollars", headers=seed.headers["employee"])
    assert response.status_code == 400
