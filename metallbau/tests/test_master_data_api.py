from fastapi.testclient import TestClient

from metallbau.main import app

client = TestClient(app)


def _auth_headers(company_id: int, role: str = "MANAGER") -> dict:
    resp = client.post("/auth/token", json={"user_id": "test", "company_id": company_id, "role": role})
    assert resp.status_code == 200, resp.text
    return {"X-Company-Id": str(company_id), "Authorization": f"Bearer {resp.json()['access_token']}"}


def test_seed_time_types_is_idempotent():
    company_id = 14001
    headers = _auth_headers(company_id)

    first = client.post("/metallbau/time-types/seed", headers=headers)
    second = client.post("/metallbau/time-types/seed", headers=headers)
    assert first.status_code == 200
    assert second.status_code == 200

    codes = [row["code"] for row in second.json()]
    assert codes == ["PROJECT", "ORDER", "GENERAL", "ADMIN", "TRAINING", "ABSENCE"]

    relevant = {row["code"] for row in second.json() if row["is_project_relevant"]}
    assert relevant == {"PROJECT", "ORDER"}


def test_duplicate_time_type_is_rejected():
    company_id = 14002
    headers = _auth_headers(company_id)
    client.post("/metallbau/time-types/seed", headers=headers)

    dup = client.post(
        "/metallbau/time-types",
        headers=headers,
        json={"code": "ADMIN", "name": "Nochmals Admin"},
    )
    assert dup.status_code == 400


def test_seed_activity_types_lists_per_company():
    headers = _auth_headers(14003)
    seeded = client.post("/metallbau/activity-types/seed", headers=headers)
    assert seeded.status_code == 200
    assert any(row["code"] == "SCHWEISSEN" for row in seeded.json())

    other = client.get("/metallbau/activity-types", headers=_auth_headers(14004, "EMPLOYEE"))
    assert other.status_code == 200
    assert other.json() == []


def test_default_phases_follow_project_type():
    company_id = 14005
    headers = _auth_headers(company_id)
    project = client.post(
        "/projects",
        headers=headers,
        json={"number": "M-1", "name": "Vordach", "project_type": "MONTAGE"},
    ).json()

    resp = client.post(
        f"/metallbau/projects/{project['id']}/phases/default",
        headers=headers,
        json={"project_type": "MONTAGE"},
    )
    assert resp.status_code == 200, resp.text
    assert [p["phase_type"] for p in resp.json()] == ["PLANUNG", "MONTAGE", "ABSCHLUSS"]

    phase_id = resp.json()[1]["id"]
    done = client.put(f"/metallbau/phases/{phase_id}", headers=headers, json={"is_completed": True})
    assert done.status_code == 200
    assert done.json()["is_completed"] is True
    assert done.json()["completed_at"] is not None


def test_phase_on_closed_project_is_forbidden():
    company_id = 14006
    headers = _auth_headers(company_id)
    project = client.post(
        "/projects",
        headers=headers,
        json={"number": "C-1", "name": "Abgeschlossen", "status": "COMPLETED"},
    ).json()

    resp = client.post(
        f"/metallbau/projects/{project['id']}/phases",
        headers=headers,
        json={"name": "Nachtrag", "phase_type": "MONTAGE"},
    )
    assert resp.status_code == 403


def test_machine_crud_and_isolation():
    company_id = 14007
    headers = _auth_headers(company_id)

    created = client.post(
        "/metallbau/machines",
        headers=headers,
        json={"name": "Abkantpresse", "machine_type": "PRESSE", "hourly_rate_cents": 8500, "purchase_value_cents": 12000000},
    )
    assert created.status_code == 200, created.text
    machine = created.json()
    assert machine["status"] == "ACTIVE"
    assert machine["current_book_value_cents"] == 12000000

    updated = client.put(
        f"/metallbau/machines/{machine['id']}",
        headers=headers,
        json={"status": "MAINTENANCE"},
    )
    assert updated.status_code == 200
    assert updated.json()["status"] == "MAINTENANCE"

    listing = client.get("/metallbau/machines", headers=headers, params={"status": "MAINTENANCE"})
    assert listing.json()["total"] == 1

    foreign = client.get(f"/metallbau/machines/{machine['id']}", headers=_auth_headers(14008))
    assert foreign.status_code == 404


def test_budget_line_total_is_quantity_times_price():
    company_id = 14009
    headers = _auth_headers(company_id)
    project = client.post("/projects", headers=headers, json={"number": "B-1", "name": "Balkon"}).json()

    resp = client.post(
        "/metallbau/budget-lines",
        headers=headers,
        json={
            "project_id": project["id"],
            "cost_type": "MATERIAL",
            "description": "Flachstahl",
            "planned_quantity": "12.5",
            "planned_unit_price_cents": 840,
        },
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["planned_total_cents"] == 10500

    lines = client.get(f"/metallbau/projects/{project['id']}/budget-lines", headers=headers)
    assert len(lines.json()) == 1


def test_employee_cannot_create_master_data():
    resp = client.post(
        "/metallbau/machines",
        headers=_auth_headers(14010, "EMPLOYEE"),
        json={"name": "Säge", "hourly_rate_cents": 3000},
    )
    assert resp.status_code == 403


def test_budget_line_rejects_phase_of_other_company():
    own_headers = _auth_headers(14011)
    other_headers = _auth_headers(14012)
    own_project = client.post("/projects", headers=own_headers, json={"number": "B-2", "name": "Treppe"}).json()
    other_project = client.post("/projects", headers=other_headers, json={"number": "B-3", "name": "Tor"}).json()
    other_phase = client.post(
        f"/metallbau/projects/{other_project['id']}/phases",
        headers=other_headers,
        json={"name": "Fertigung", "phase_type": "FERTIGUNG"},
    ).json()

    resp = client.post(
        "/metallbau/budget-lines",
        headers=own_headers,
        json={
            "project_id": own_project["id"],
            "project_phase_id": other_phase["id"],
            "cost_type": "LABOR",
            "description": "Schweissarbeiten",
            "planned_quantity": "10",
            "planned_unit_price_cents": 6500,
        },
    )
    assert resp.status_code == 404

    lines = client.get(f"/metallbau/projects/{own_project['id']}/budget-lines", headers=own_headers)
    assert lines.status_code == 200
    assert lines.json() == []


def test_budget_lines_of_foreign_project_are_not_found():
    project = client.post(
        "/projects", headers=_auth_headers(14013), json={"number": "B-4", "name": "Geländer"}
    ).json()

    resp = client.get(f"/metallbau/projects/{project['id']}/budget-lines", headers=_auth_headers(14014))
    assert resp.status_code == 404
