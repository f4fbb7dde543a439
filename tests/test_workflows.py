WORKFLOW = {
    "name": "Large travel",
    "description": "Two-step approval above 50k",
    "rules": {"steps": [{"role": "MANAGER"}, {"role": "ADMIN"}], "threshold": 50000},
    "conditions": {"category": "TRAVEL"},
}


def _create(client, seed, **overrides):
    return client.post("/api/workflows", json={**WORKFLOW, **overrides}, headers=seed.headers["admin"])


def test_admin_creates_workflow(client, seed):
    response = _create(client, seed)

    assert response.status_code == 201
    workflow = response.get_json()["workflow"]
    assert workflow["rules"]["threshold"] == 50000
    assert workflow["conditions"] == {"category": "TRAVEL"}
    assert workflow["is_active"] is True
    assert workflow["created_by"] == seed.ids["admin"]


def test_workflow_validation(client, seed):
    no_rules = client.post("/api/workflows", json={"name": "Empty"}, headers=seed.headers["admin"])
    assert no_rules.status_code == 400
    assert "rules" in no_rules.get_json()["errors"]

    list_rules = _create(client, seed, rules=["step"])
    assert list_rules.status_code == 400

    bad_conditions = _create(client, seed, conditions="travel")
    assert bad_conditions.status_code == 400

    no_name = _create(client, seed, name="   ")
    assert no_name.status_code == 400


def test_duplicate_name_conflicts(client, seed):
    _create(client, seed)
    assert _create(client, seed).status_code == 409


def test_manager_reads_but_cannot_write(client, seed):
    workflow_id = _create(client, seed).get_json()["workflow"]["id"]

    listing = client.get("/api/workflows", headers=seed.headers["manager"])
    assert [w["id"] for w in listing.get_json()["workflows"]] == [workflow_id]
    assert client.get(f"/api/workflows/{workflow_id}", headers=seed.headers["manager"]).status_code == 200

    assert client.post("/api/workflows", json=WORKFLOW, headers=seed.headers["manager"]).status_code == 403
    assert client.delete(f"/api/workflows/{workflow_id}", headers=seed.headers["manager"]).status_code == 403
    assert client.get("/api/workflows", headers=seed.headers["employee"]).status_code == 403


def test_update_and_delete(client, seed):
    workflow_id = _create(client, seed).get_json()["workflow"]["id"]

    response = client.put(
        f"/api/workflows/{workflow_id}",
        json={"is_active": False, "rules": {"steps": [{"role": "ADMIN"}]}},
        headers=seed.headers["admin"],
    )
    assert response.status_code == 200
    updated = response.get_json()["workflow"]
    assert updated["is_active"] is False
    assert updated["rules"] == {"steps": [{"role": "ADMIN"}]}
    assert updated["name"] == "Large travel"

    assert client.delete(f"/api/workflows/{workflow_id}", headers=seed.headers["admin"]).status_code == 200
    assert client.get(f"/api/workflows/{workflow_id}", headers=seed.headers["admin"]).status_code == 404


def test_rename_conflict(client, seed):
    _create(client, seed)
    other_id = _create(client, seed, name="Small purchases").get_json()["workflow"]["id"]

    response = client.put(f"/api/workflows/{other_id}", json={"name": "Large travel"}, headers=seed.headers["admin"])
    assert response.status_code == 409


def test_workflows_are_tenant_scoped(client, seed):
    workflow_id = _create(client, seed).get_json()["workflow"]["id"]

    assert client.get("/api/workflows", headers=seed.headers["outsider"]).get_json()["workflows"] == []
    assert client.get(f"/api/workflows/{workflow_id}", headers=seed.headers["outsider"]).status_code == 404
    assert client.delete(f"/api/workflows/{workflow_id}", headers=seed.headers["outsider"]).status_code == 404
