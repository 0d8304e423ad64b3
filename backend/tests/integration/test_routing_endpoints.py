"""
Integration tests for Routing endpoints

Tests CRUD, pricing, the primary pricing route and step editing over HTTP
"""
import pytest
from decimal import Decimal

BASE = "/api/v1/routings"


def D(value) -> Decimal:
    return Decimal(str(value))


@pytest.fixture
def routing_payload(processes, routing_category):
    return {
        "description": "Laser cut and formed bracket",
        "category": "Sheet Metal",
        "material_markup_percent": "35",
        "finishing_cost_per_area": "0.5",
        "steps": [
            {"process_id": processes["laser"].id},
            {"process_id": processes["bend"].id},
        ],
    }


@pytest.fixture
def created(client, routing_payload):
    response = client.post(f"{BASE}/", json=routing_payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateRouting:
    """POST /routings"""

    def test_create_generates_name_and_totals(self, created, routing_category):
        assert created["name"] == "Laser Cutting - Bending"
        assert created["category"] == "Sheet Metal"
        assert created["category_id"] == routing_category.id
        assert created["step_count"] == 2
        assert [s["sequence"] for s in created["steps"]] == [1, 2]
        assert D(created["total_setup_time"]) == Decimal("45")
        assert D(created["total_cost"]) == Decimal("298.75")
        assert created["is_primary_pricing_route"] is False
        assert created["active"] is True

    def test_explicit_name_is_kept(self, client, routing_payload):
        routing_payload["name"] = "Bracket Route"
        response = client.post(f"{BASE}/", json=routing_payload)
        assert response.json()["name"] == "Bracket Route"

    def test_category_by_id(self, client, routing_payload, routing_category):
        del routing_payload["category"]
        routing_payload["category_id"] = routing_category.id
        response = client.post(f"{BASE}/", json=routing_payload)
        assert response.status_code == 201
        assert response.json()["category"] == "Sheet Metal"

    def test_missing_required_fields(self, client, routing_payload):
        routing_payload["description"] = ""
        del routing_payload["category"]
        response = client.post(f"{BASE}/", json=routing_payload)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "VALIDATION_ERROR"
        assert data["details"]["missing_fields"] == ["description", "category"]
        assert "timestamp" in data

    def test_unknown_category_name(self, client, routing_payload):
        routing_payload["category"] = "Forgings"
        response = client.post(f"{BASE}/", json=routing_payload)

        assert response.status_code == 422
        assert response.json()["error"] == "UNRESOLVED_CATEGORY"

    def test_unknown_process(self, client, routing_payload):
        routing_payload["steps"].append({"process_id": "missing"})
        response = client.post(f"{BASE}/", json=routing_payload)

        assert response.status_code == 404
        assert response.json()["error"] == "INVALID_REFERENCE"

    @pytest.mark.parametrize("value", ["0", "-1"])
    def test_non_positive_multiplier_rejected(self, client, routing_payload, value):
        routing_payload["steps"][0]["runtime_multiplier"] = value
        response = client.post(f"{BASE}/", json=routing_payload)

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_empty_routing_is_allowed(self, client, routing_payload):
        routing_payload["steps"] = []
        routing_payload["name"] = "Shell"
        response = client.post(f"{BASE}/", json=routing_payload)

        assert response.status_code == 201
        # material 100 * 1.35 + finishing 0.5 * 100
        assert D(response.json()["total_cost"]) == Decimal("185")


class TestReadRoutings:

    def test_get(self, client, created):
        response = client.get(f"{BASE}/{created['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    def test_get_unknown(self, client):
        response = client.get(f"{BASE}/missing")
        assert response.status_code == 404
        assert response.json()["details"]["resource"] == "Routing"

    def test_list_with_stats(self, client, created):
        response = client.get(f"{BASE}/")
        assert response.status_code == 200
        data = response.json()

        assert data["total"] == 1
        assert data["routings"][0]["id"] == created["id"]
        assert data["stats"]["total_routings"] == 1
        assert data["stats"]["active_routings"] == 1
        assert D(data["stats"]["average_steps"]) == Decimal("2")

    def test_list_filters(self, client, created):
        assert client.get(f"{BASE}/", params={"active": "false"}).json()["total"] == 0
        assert client.get(f"{BASE}/", params={"search": "bending"}).json()["total"] == 1
        assert client.get(f"{BASE}/", params={"category": "sheet metal"}).json()["total"] == 1

    def test_list_rejects_bad_order(self, client):
        assert client.get(f"{BASE}/", params={"order": "sideways"}).status_code == 422

    def test_list_rejects_unknown_sort(self, client):
        response = client.get(f"{BASE}/", params={"sort": "colour"})
        assert response.status_code == 422

    def test_list_sorted_by_total_cost(self, client, created, routing_payload):
        cheaper = client.post(
            f"{BASE}/", json={**routing_payload, "name": "Cut only", "steps": routing_payload["steps"][:1]}
        ).json()

        routings = client.get(f"{BASE}/", params={"sort": "total_cost", "order": "desc"}).json()["routings"]
        assert [r["id"] for r in routings] == [created["id"], cheaper["id"]]


class TestUpdateAndDelete:

    def test_partial_update(self, client, created):
        response = client.put(
            f"{BASE}/{created['id']}",
            json={"estimated_lead_time_days": 5, "finishing_cost_per_area": "0"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["estimated_lead_time_days"] == 5
        assert data["name"] == created["name"]
        assert data["step_count"] == 2
        assert D(data["total_cost"]) == Decimal("248.75")

    def test_replace_steps_keeps_existing_ids(self, client, created, processes):
        laser, bend = created["steps"]
        response = client.put(
            f"{BASE}/{created['id']}",
            json={"steps": [
                {"id": bend["id"], "process_id": processes["bend"].id},
                {"id": laser["id"], "process_id": processes["laser"].id, "setup_time_multiplier": "2"},
            ]},
        )
        data = response.json()

        assert [s["id"] for s in data["steps"]] == [bend["id"], laser["id"]]
        assert data["name"] == "Bending - Laser Cutting"
        assert D(data["total_setup_time"]) == Decimal("75")

    def test_delete(self, client, created):
        response = client.delete(f"{BASE}/{created['id']}")
        assert response.status_code == 204
        assert client.get(f"{BASE}/{created['id']}").status_code == 404


class TestPrimaryAndDuplicate:

    def test_primary_is_null_initially(self, client, created):
        response = client.get(f"{BASE}/primary")
        assert response.status_code == 200
        assert response.json() is None

    def test_set_primary_single_winner(self, client, created, routing_payload):
        other = client.post(f"{BASE}/", json={**routing_payload, "name": "Other"}).json()

        client.post(f"{BASE}/{created['id']}/set-primary")
        response = client.post(f"{BASE}/{other['id']}/set-primary")
        assert response.json()["is_primary_pricing_route"] is True

        routings = client.get(f"{BASE}/").json()["routings"]
        assert [r["id"] for r in routings if r["is_primary_pricing_route"]] == [other["id"]]
        assert client.get(f"{BASE}/primary").json()["id"] == other["id"]

    def test_set_primary_unknown(self, client):
        assert client.post(f"{BASE}/missing/set-primary").status_code == 404

    def test_duplicate(self, client, created):
        client.post(f"{BASE}/{created['id']}/set-primary")
        response = client.post(f"{BASE}/{created['id']}/duplicate")

        assert response.status_code == 201
        copy = response.json()
        assert copy["id"] != created["id"]
        assert copy["name"] == "Laser Cutting - Bending (Copy)"
        assert copy["is_primary_pricing_route"] is False
        assert not {s["id"] for s in copy["steps"]} & {s["id"] for s in created["steps"]}

    def test_duplicate_longest_accepted_name(self, client, routing_payload):
        original = client.post(f"{BASE}/", json={**routing_payload, "name": "N" * 500}).json()

        response = client.post(f"{BASE}/{original['id']}/duplicate")
        assert response.status_code == 201, response.text
        copy = client.get(f"{BASE}/{response.json()['id']}").json()
        assert copy["name"] == "N" * 500 + " (Copy)"

    def test_toggle_active(self, client, created):
        response = client.post(f"{BASE}/{created['id']}/toggle-active")
        assert response.json()["active"] is False
        response = client.post(f"{BASE}/{created['id']}/toggle-active")
        assert response.json()["active"] is True


class TestCost:

    def test_cost_with_defaults(self, client, created):
        response = client.get(f"{BASE}/{created['id']}/cost")
        assert response.status_code == 200
        data = response.json()

        assert D(data["setup_cost"]) == Decimal("43.75")
        assert D(data["runtime_cost"]) == Decimal("70")
        assert D(data["processing_cost"]) == Decimal("113.75")
        assert D(data["material_cost"]) == Decimal("135")
        assert D(data["finishing_cost"]) == Decimal("50")
        assert D(data["total_cost"]) == Decimal("298.75")

    def test_cost_with_quantity(self, client, created):
        data = client.get(f"{BASE}/{created['id']}/cost", params={"quantity": 2}).json()
        assert D(data["processing_cost"]) == Decimal("183.75")

    def test_cost_rejects_zero_quantity(self, client, created):
        assert client.get(f"{BASE}/{created['id']}/cost", params={"quantity": 0}).status_code == 422

    def test_preview(self, client, processes):
        response = client.post(f"{BASE}/cost-preview", json={
            "steps": [
                {"process_id": processes["laser"].id},
                {"process_id": processes["bend"].id},
            ],
            "material_markup_percent": "35",
            "finishing_cost_per_area": "0.5",
        })
        assert response.status_code == 200
        assert D(response.json()["total_cost"]) == Decimal("298.75")

    def test_preview_with_no_steps(self, client):
        response = client.post(f"{BASE}/cost-preview", json={"material_cost": "40"})
        assert D(response.json()["total_cost"]) == Decimal("40")


class TestStepEditing:

    def test_add_step(self, client, created, processes):
        response = client.post(f"{BASE}/{created['id']}/steps", json={"process_id": processes["laser"].id})

        assert response.status_code == 201
        data = response.json()
        assert data["step_count"] == 3
        assert data["steps"][2]["sequence"] == 3
        assert data["name"] == "Laser Cutting - Bending - Laser Cutting"

    def test_add_unknown_process(self, client, created):
        response = client.post(f"{BASE}/{created['id']}/steps", json={"process_id": "missing"})
        assert response.status_code == 404

    def test_move_step(self, client, created):
        laser, bend = created["steps"]
        response = client.post(f"{BASE}/{created['id']}/steps/{bend['id']}/move", json={"new_index": 0})

        data = response.json()
        assert [s["id"] for s in data["steps"]] == [bend["id"], laser["id"]]
        assert [s["sequence"] for s in data["steps"]] == [1, 2]

    def test_move_out_of_range(self, client, created):
        step_id = created["steps"][0]["id"]
        response = client.post(f"{BASE}/{created['id']}/steps/{step_id}/move", json={"new_index": 2})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "OUT_OF_RANGE"
        assert data["details"]["upper"] == 1

    def test_update_step(self, client, created):
        step_id = created["steps"][0]["id"]
        response = client.patch(
            f"{BASE}/{created['id']}/steps/{step_id}",
            json={"setup_time_multiplier": "2", "notes": "Nest tightly"},
        )

        data = response.json()
        assert D(data["steps"][0]["setup_time_multiplier"]) == Decimal("2")
        assert data["steps"][0]["notes"] == "Nest tightly"
        assert D(data["total_setup_time"]) == Decimal("75")

    def test_update_unknown_step(self, client, created):
        response = client.patch(f"{BASE}/{created['id']}/steps/missing", json={"notes": "x"})
        assert response.status_code == 404

    def test_update_step_rejects_zero_multiplier(self, client, created):
        step_id = created["steps"][0]["id"]
        response = client.patch(
            f"{BASE}/{created['id']}/steps/{step_id}", json={"runtime_multiplier": "0"}
        )
        assert response.status_code == 422

    def test_update_step_empty_body(self, client, created):
        step_id = created["steps"][0]["id"]
        response = client.patch(f"{BASE}/{created['id']}/steps/{step_id}", json={})
        assert response.status_code == 400

    def test_remove_step_is_idempotent(self, client, created):
        laser, bend = created["steps"]
        url = f"{BASE}/{created['id']}/steps/{laser['id']}"

        first = client.delete(url)
        second = client.delete(url)

        assert first.status_code == second.status_code == 200
        assert [s["id"] for s in second.json()["steps"]] == [bend["id"]]
        assert second.json()["steps"][0]["sequence"] == 1


class TestAppSurface:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_security_and_query_headers(self, client):
        response = client.get(f"{BASE}/")
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert "X-Query-Count" in response.headers
