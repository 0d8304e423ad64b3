"""
Integration tests for Process endpoints
"""
from decimal import Decimal

from app.schemas.process import ProcessCreate
from tests.factories import create_test_category, create_test_process

BASE = "/api/v1/processes"


class TestProcessCatalog:
    """Test process CRUD"""

    def test_create_process(self, client, db_session):
        category = create_test_category(db_session, name="Cutting", category_type="process")
        db_session.commit()

        response = client.post(f"{BASE}/", json={
            "name": "Waterjet",
            "category_id": category.id,
            "setup_time_minutes": "20",
            "hourly_rate": "140",
            "minimum_cost": "75",
            "complexity_multiplier": "1.1",
            "equipment_required": "Waterjet table",
            "skill_level": "expert",
        })

        assert response.status_code == 201, response.text
        data = response.json()
        assert data["id"]
        assert data["category_name"] == "Cutting"
        assert Decimal(data["hourly_rate"]) == Decimal("140")
        assert data["is_active"] is True

    def test_create_with_defaults(self, client):
        response = client.post(f"{BASE}/", json={"name": "Deburr"})

        assert response.status_code == 201, response.text
        data = response.json()
        assert Decimal(data["hourly_rate"]) == Decimal("0")
        assert Decimal(data["complexity_multiplier"]) == Decimal("1")

    def test_schema_defaults_are_decimals(self):
        process = ProcessCreate(name="Deburr")
        assert isinstance(process.setup_time_minutes, Decimal)
        assert isinstance(process.complexity_multiplier, Decimal)

    def test_create_with_routing_category_is_rejected(self, client, routing_category):
        response = client.post(f"{BASE}/", json={"name": "Waterjet", "category_id": routing_category.id})
        assert response.status_code == 404
        assert response.json()["error"] == "INVALID_REFERENCE"

    def test_create_rejects_zero_complexity(self, client):
        response = client.post(f"{BASE}/", json={"name": "Waterjet", "complexity_multiplier": "0"})
        assert response.status_code == 422

    def test_list_and_filter(self, client, db_session, processes):
        create_test_process(db_session, name="Retired Saw", is_active=False)
        db_session.commit()

        names = [p["name"] for p in client.get(f"{BASE}/").json()]
        assert names == ["Bending", "Laser Cutting"]

        names = [p["name"] for p in client.get(f"{BASE}/", params={"active_only": "false"}).json()]
        assert "Retired Saw" in names

        names = [p["name"] for p in client.get(f"{BASE}/", params={"search": "laser"}).json()]
        assert names == ["Laser Cutting"]

    def test_get_unknown(self, client):
        response = client.get(f"{BASE}/missing")
        assert response.status_code == 404
        assert response.json()["details"]["resource"] == "Process"

    def test_update_does_not_reprice_existing_steps(self, client, processes, routing_category):
        routing = client.post("/api/v1/routings/", json={
            "description": "Single cut",
            "category": "Sheet Metal",
            "steps": [{"process_id": processes["laser"].id}],
        }).json()

        response = client.put(f"{BASE}/{processes['laser'].id}", json={"hourly_rate": "500"})
        assert response.status_code == 200
        assert Decimal(response.json()["hourly_rate"]) == Decimal("500")

        step = client.get(f"/api/v1/routings/{routing['id']}").json()["steps"][0]
        assert Decimal(step["hourly_rate"]) == Decimal("50")

        # New steps pick up the new rate
        added = client.post(
            f"/api/v1/routings/{routing['id']}/steps",
            json={"process_id": processes["laser"].id},
        ).json()
        assert Decimal(added["steps"][1]["hourly_rate"]) == Decimal("500")
